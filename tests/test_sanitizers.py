import pytest

from woo_settings_mcp.validation import MAX_INT, absint, canonical_boolean, kses_post, sanitize_text_field
from woo_settings_mcp.schema import Sanitizer, SettingDescriptor, SettingType


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  123 Main St  ", "123 Main St"),
        ("Line\none\ttwo", "Line one two"),
        ("<b>Bold</b> street", "Bold street"),
        ("<script>alert(1)</script>Main", "Main"),
        ("a < b", "a &lt; b"),
        ("Suite %20 5", "Suite 5"),
        ("broken <em", "broken"),
        (42, "42"),
        (None, ""),
    ],
)
def test_sanitize_text_field(raw, expected):
    assert sanitize_text_field(raw) == expected


@pytest.mark.parametrize("raw", ["<p>x</p> y", "a < b", "%4%41%41", "  spaced   out ", "<<b>>"])
def test_sanitize_text_field_is_idempotent(raw):
    once = sanitize_text_field(raw)
    assert sanitize_text_field(once) == once


@pytest.mark.parametrize(
    "raw, expected",
    [
        (",", ","),
        (" ", " "),
        ("<span class='sep'>.</span>", "<span>.</span>"),
        ("<div>,</div>", ","),
        ("<script>x</script>.", "."),
        ("<!-- c -->,", ","),
    ],
)
def test_kses_post(raw, expected):
    assert kses_post(raw) == expected


@pytest.mark.parametrize("raw", ["<STRONG onclick='x'>,</STRONG>", "a < b", "<b>.", " "])
def test_kses_post_is_idempotent(raw):
    once = kses_post(raw)
    assert kses_post(once) == once


@pytest.mark.parametrize(
    "raw, expected",
    [(3, 3), (-3, 3), ("7", 7), ("12abc", 12), ("abc", 0), (2.9, 2), (True, 1), (None, 0)],
)
def test_absint(raw, expected):
    assert absint(raw) == expected


def test_absint_saturates_long_input():
    assert absint("9" * 5000) == MAX_INT
    assert absint("-" + "1" * 30 + "x") == MAX_INT
    assert absint("0" * 5000 + "42") == 42
    assert absint(float("inf")) == 0
    assert absint(float("nan")) == 0


@pytest.mark.parametrize(
    "raw, expected",
    [(True, "yes"), ("yes", "yes"), ("1", "yes"), (1, "yes"), (False, "no"), ("no", "no"), ("0", "no"), (0, "no")],
)
def test_canonical_boolean(raw, expected):
    assert canonical_boolean(raw) == expected
    assert canonical_boolean(canonical_boolean(raw)) == expected


def test_declared_sanitizers_apply(validator):
    assert validator.sanitize("woocommerce_store_city", "  <i>Paris</i> ") == "Paris"
    assert validator.sanitize("woocommerce_price_num_decimals", "4") == 4
    assert validator.sanitize("woocommerce_price_thousand_sep", "<b>,</b>") == "<b>,</b>"


def test_default_sanitizers_by_type(validator):
    array_descriptor = SettingDescriptor(
        type=SettingType.ARRAY, label="x", description="x", group="general_options"
    )
    assert validator.sanitize_against(array_descriptor, [" US ", "<b>GB</b>"]) == ["US", "GB"]
    assert validator.sanitize_against(array_descriptor, None) == []

    bool_descriptor = SettingDescriptor(
        type=SettingType.BOOLEAN, label="x", description="x", group="general_options"
    )
    assert validator.sanitize_against(bool_descriptor, True) == "yes"
    assert validator.sanitize_against(bool_descriptor, "0") == "no"

    int_descriptor = SettingDescriptor(
        type=SettingType.INTEGER, label="x", description="x", group="currency_options"
    )
    assert validator.sanitize_against(int_descriptor, "5") == 5


def test_sanitize_unknown_key(validator):
    with pytest.raises(KeyError):
        validator.sanitize("unknown_x", "v")


CATALOG_INPUTS = [
    ("woocommerce_store_address", "  <b>123</b>\tMain   St %41 "),
    ("woocommerce_store_address_2", "Suite <em>5</em>"),
    ("woocommerce_store_city", "  Paris\n"),
    ("woocommerce_default_country", "US:CA"),
    ("woocommerce_store_postcode", " 94103 "),
    ("woocommerce_allowed_countries", "all_except"),
    ("woocommerce_all_except_countries", ["US", "GB"]),
    ("woocommerce_specific_allowed_countries", ["CA", "DE"]),
    ("woocommerce_ship_to_countries", ""),
    ("woocommerce_specific_ship_to_countries", []),
    ("woocommerce_default_customer_address", "geolocation"),
    ("woocommerce_currency", "EUR"),
    ("woocommerce_currency_pos", "right_space"),
    ("woocommerce_price_thousand_sep", "<span class='t'>,</span>"),
    ("woocommerce_price_decimal_sep", " "),
    ("woocommerce_price_num_decimals", "0004"),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("key, raw", CATALOG_INPUTS)
async def test_catalog_sanitize_is_idempotent(validator, registry, key, raw):
    assert (await validator.validate(key, raw)).valid
    descriptor = registry.get(key)
    once = validator.sanitize_against(descriptor, raw)
    assert validator.sanitize_against(descriptor, once) == once


def _descriptor(setting_type, sanitizer=None):
    return SettingDescriptor(
        type=setting_type, label="x", description="x", group="general_options", sanitizer=sanitizer
    )


@pytest.mark.parametrize(
    "descriptor, raw",
    [
        (_descriptor(SettingType.STRING), "  <i>a</i>  b %20"),
        (_descriptor(SettingType.INTEGER), "12abc"),
        (_descriptor(SettingType.INTEGER), -7),
        (_descriptor(SettingType.INTEGER, Sanitizer.ABSINT), "9" * 5000),
        (_descriptor(SettingType.ARRAY), [" US ", "<b>GB</b>", 3]),
        (_descriptor(SettingType.ARRAY), "single"),
        (_descriptor(SettingType.ARRAY), None),
        (_descriptor(SettingType.ARRAY, Sanitizer.TEXT_FIELD), [" a ", "<p>b</p>"]),
        (_descriptor(SettingType.ARRAY, Sanitizer.KSES_POST), ["<div>,</div>", " "]),
        (_descriptor(SettingType.BOOLEAN), "1"),
        (_descriptor(SettingType.BOOLEAN), False),
    ],
)
def test_sanitize_is_idempotent_for_every_type(validator, descriptor, raw):
    once = validator.sanitize_against(descriptor, raw)
    assert validator.sanitize_against(descriptor, once) == once
