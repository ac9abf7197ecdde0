import math

import pytest

from grocery_proxy.app.schemas import ProductRecord
from grocery_proxy.pricing.normalize import normalize_record, normalize_results, pick, to_number


@pytest.mark.parametrize(
    "value,expected",
    [
        ("$4.50", 4.5),
        ("1,299.00", 1299.0),
        (" 3.2 ", 3.2),
        (7, 7.0),
        (2.25, 2.25),
    ],
)
def test_to_number(value, expected):
    assert to_number(value) == pytest.approx(expected)


@pytest.mark.parametrize("value", [None, "abc", "", "$", math.inf, math.nan, {}, True])
def test_to_number_rejects(value):
    assert to_number(value) is None


def test_pick_is_case_and_separator_insensitive():
    payload = {"ProductName": "Oreo", "product_size": "133g", "PRICE": "$2.00"}
    assert pick(payload, ("productName", "name")) == "Oreo"
    assert pick(payload, ("productSize", "size")) == "133g"
    assert pick(payload, ("currentPrice", "price")) == "$2.00"


def test_pick_skips_empty_candidates_in_order():
    payload = {"productUrl": "", "url": "https://coles.com.au/p/1", "link": "https://other"}
    assert pick(payload, ("productUrl", "url", "link")) == "https://coles.com.au/p/1"
    assert pick({}, ("productUrl",)) is None


def test_normalize_coles_shape():
    record = normalize_record(
        {
            "productName": "Oreo Original",
            "productSize": "133g",
            "currentPrice": "$2.50",
            "productUrl": "https://www.coles.com.au/product/oreo-123",
            "productId": 123,
        }
    )
    assert record.product == "Oreo Original"
    assert record.size == "133g"
    assert record.price == 2.5
    assert record.url == "https://www.coles.com.au/product/oreo-123"
    assert record.id == "123"
    assert record.price_per_kg == pytest.approx(18.8)


def test_normalize_woolworths_shape():
    record = normalize_record(
        {"Name": "Plain Flour", "PackageSize": "2 x 1kg", "Price": 4, "Url": "https://woolworths.com.au/x", "Sku": "55"}
    )
    assert record.product == "Plain Flour"
    assert record.price == 4.0
    assert record.price_per_kg == 2.0
    assert record.id == "55"


def test_normalize_missing_fields_degrade():
    record = normalize_record({"unexpected": True})
    assert record == ProductRecord()
    assert record.url is None
    assert record.price is None
    assert record.price_per_kg is None


def test_normalize_non_mapping_result():
    assert normalize_record("garbage") == ProductRecord()


def test_price_per_kg_is_derived_from_price_and_size():
    assert ProductRecord(price=10, size="2kg").price_per_kg == 5.0
    assert ProductRecord(price=None, size="2kg").price_per_kg is None
    assert ProductRecord(price=3, size="assorted").price_per_kg is None
    assert ProductRecord(price=1, size="300g").price_per_kg == 3.33


def test_price_per_kg_serializes_under_camel_case_alias():
    dumped = ProductRecord(price=10, size="2kg").model_dump(by_alias=True)
    assert dumped["pricePerKg"] == 5.0


def test_records_are_immutable():
    record = ProductRecord(price=1)
    with pytest.raises(Exception):
        record.price = 2


def test_normalize_results_tolerates_missing_results():
    assert normalize_results({}) == []
    assert normalize_results({"results": None}) == []
    assert normalize_results([]) == []
    records = normalize_results({"results": [{"name": "a", "price": 1}, {"name": "b"}]})
    assert [r.product for r in records] == ["a", "b"]


def test_oversized_price_degrades_to_none():
    assert to_number(10**400) is None
    record = normalize_record({"name": "x", "price": 10**400, "size": "1kg"})
    assert record.product == "x"
    assert record.price is None
    assert record.price_per_kg is None
