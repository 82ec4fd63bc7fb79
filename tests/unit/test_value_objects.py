"""Unit tests for Money and PhotoMetadata."""
from decimal import Decimal

import pytest

from classifieds.domain.enums.currency import Currency
from classifieds.domain.exceptions import InvalidArgumentError, InvalidPhotoFormatError
from classifieds.domain.value_objects.money import Money
from classifieds.domain.value_objects.photo_metadata import (
    MAX_FILE_SIZE_BYTES,
    MAX_FILENAME_LENGTH,
    PhotoMetadata,
)


class TestMoney:
    def test_keeps_two_decimal_places(self) -> None:
        money = Money.of(Decimal("20"), Currency.USD)
        assert money.amount == Decimal("20.00")
        assert str(money.amount) == "20.00"

    def test_float_goes_through_str(self) -> None:
        assert Money.of(19.99, "USD").amount == Decimal("19.99")

    def test_rounds_half_up(self) -> None:
        assert Money.of("0.005", Currency.EUR).amount == Decimal("0.01")

    def test_zero_is_allowed(self) -> None:
        assert Money.of(0, Currency.GBP).amount == Decimal("0.00")

    def test_negative_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Money.of("-1", Currency.USD)

    def test_non_finite_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Money.of("NaN", Currency.USD)

    def test_garbage_amount_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Money.of("twelve", Currency.USD)

    def test_unknown_currency_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Money.of("1", "XYZ")

    def test_str(self) -> None:
        assert str(Money.of("1999.99", Currency.UAH)) == "1999.99 UAH"


class TestPhotoMetadata:
    @pytest.mark.parametrize("content_type", ["image/jpeg", "image/png", "image/webp"])
    def test_accepts_allowed_types(self, content_type: str) -> None:
        assert PhotoMetadata("a.img", content_type, 10).content_type == content_type

    def test_content_type_is_lower_cased(self) -> None:
        assert PhotoMetadata("a.jpg", "IMAGE/JPEG", 10).content_type == "image/jpeg"

    def test_rejects_pdf(self) -> None:
        with pytest.raises(InvalidPhotoFormatError):
            PhotoMetadata("doc.pdf", "application/pdf", 10)

    def test_rejects_empty_file(self) -> None:
        with pytest.raises(InvalidPhotoFormatError):
            PhotoMetadata("a.jpg", "image/jpeg", 0)

    def test_max_size_is_inclusive(self) -> None:
        assert PhotoMetadata("a.jpg", "image/jpeg", MAX_FILE_SIZE_BYTES).size == MAX_FILE_SIZE_BYTES

    def test_rejects_one_byte_over(self) -> None:
        with pytest.raises(InvalidPhotoFormatError):
            PhotoMetadata("a.jpg", "image/jpeg", MAX_FILE_SIZE_BYTES + 1)

    def test_rejects_blank_filename(self) -> None:
        with pytest.raises(InvalidArgumentError):
            PhotoMetadata("  ", "image/jpeg", 10)

    def test_filename_length_limit_is_inclusive(self) -> None:
        name = "a" * (MAX_FILENAME_LENGTH - 4) + ".jpg"
        assert PhotoMetadata(name, "image/jpeg", 10).filename == name

    def test_rejects_overlong_filename(self) -> None:
        with pytest.raises(InvalidArgumentError):
            PhotoMetadata("a" * MAX_FILENAME_LENGTH + ".jpg", "image/jpeg", 10)

    @pytest.mark.parametrize("name", ["photo.\x00jpg", "line\nbreak.jpg", "bell\x07.png", "del\x7f.jpg"])
    def test_rejects_control_characters_in_filename(self, name: str) -> None:
        with pytest.raises(InvalidArgumentError):
            PhotoMetadata(name, "image/jpeg", 10)
