import codecs

from inputlog.obfuscation.base import BaseObfuscator


class Rot13Obfuscator(BaseObfuscator):
    """ROT13 over ASCII letters; every other character passes through verbatim.

    Privacy at rest against casual reading, not encryption. The transform is
    its own inverse, so decode is encode.
    """

    def encode(self, text: str | None) -> str | None:
        if not text:
            return text
        return codecs.encode(text, "rot_13")

    def decode(self, text: str | None) -> str | None:
        return self.encode(text)
