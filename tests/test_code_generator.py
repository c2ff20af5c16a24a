"""
Tests for short code generation.
"""
import pytest

from shortlink_app.services.code_generator import (
    BASE62_ALPHABET,
    RandomCodeGenerator,
    generate_code,
)


class TestRandomCodeGenerator:
    """Test random base62 code generation"""

    def test_generates_configured_length(self):
        """Codes always have exactly the configured length"""
        generator = RandomCodeGenerator(length=6)

        for _ in range(100):
            assert len(generator.generate()) == 6

    def test_uses_base62_alphabet_only(self):
        """Every character comes from [0-9a-zA-Z]"""
        code = generate_code(500)

        assert set(code) <= set(BASE62_ALPHABET)

    def test_alphabet_has_62_symbols(self):
        assert len(BASE62_ALPHABET) == 62
        assert len(set(BASE62_ALPHABET)) == 62

    def test_codes_vary(self):
        """Random codes are not repeated in a small sample"""
        generator = RandomCodeGenerator(length=8)

        codes = {generator.generate() for _ in range(50)}

        assert len(codes) == 50

    def test_rejects_non_positive_length(self):
        with pytest.raises(ValueError):
            RandomCodeGenerator(length=0)
