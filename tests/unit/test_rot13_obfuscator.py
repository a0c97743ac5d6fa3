import string

import pytest

from inputlog.obfuscation.rot13 import Rot13Obfuscator


class TestRot13Obfuscator:
    def test_rotates_letters_preserving_case(self) -> None:
        assert Rot13Obfuscator().encode("Hello World") == "Uryyb Jbeyq"

    def test_leaves_non_letters_untouched(self) -> None:
        text = "123 .,!?-_\t\r\n"
        assert Rot13Obfuscator().encode(text) == text

    @pytest.mark.parametrize("text", ["", None])
    def test_empty_input_is_noop(self, text: str | None) -> None:
        assert Rot13Obfuscator().encode(text) == text

    @pytest.mark.parametrize(
        "text",
        [string.printable, "Grüße aus Köln", "Привет, мир", "ÆØÅ æøå"],
    )
    def test_is_self_inverse(self, text: str) -> None:
        obfuscator = Rot13Obfuscator()
        assert obfuscator.encode(obfuscator.encode(text)) == text
        assert obfuscator.decode(obfuscator.encode(text)) == text

    def test_non_ascii_letters_pass_through(self) -> None:
        assert Rot13Obfuscator().encode("über") == "üore"
