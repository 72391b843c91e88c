import re

import pytest

from device_auth.services.code_generator import USER_CODE_ALPHABET, generate_device_code, generate_user_code

USER_CODE_PATTERN = re.compile(rf"^[{USER_CODE_ALPHABET}]{{4}}-[{USER_CODE_ALPHABET}]{{4}}$")


@pytest.mark.unit
class TestUserCode:
    def test_format(self):
        for _ in range(200):
            assert USER_CODE_PATTERN.match(generate_user_code())

    def test_alphabet_excludes_confusing_characters(self):
        for char in "O0I1":
            assert char not in USER_CODE_ALPHABET
        assert len(USER_CODE_ALPHABET) == 32

    def test_custom_length(self):
        code = generate_user_code(length=6)

        assert len(code) == 7
        assert code[3] == "-"


@pytest.mark.unit
class TestDeviceCode:
    def test_url_safe_and_long(self):
        code = generate_device_code()

        # 32 random bytes encode to 43 base64url characters
        assert len(code) >= 43
        assert re.match(r"^[A-Za-z0-9_-]+$", code)

    def test_codes_differ(self):
        assert len({generate_device_code() for _ in range(1000)}) == 1000
