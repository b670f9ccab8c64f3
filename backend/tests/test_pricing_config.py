import copy
import json
from pathlib import Path

import pydantic
import pytest

from app.domain.pricing.config_loader import PricingConfigError, load_pricing_config, parse_pricing_config
from app.domain.pricing.models import Efficiency
from app.domain.pricing.reference import build_reference_table

CONFIG_PATH = Path(__file__).resolve().parents[1] / "pricing" / "arqexpress_v1.json"
RAW_CONFIG = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))


def test_load_pricing_config_reports_identity():
    config = load_pricing_config("pricing/arqexpress_v1.json")
    assert config.pricing_config_id == "arqexpress"
    assert config.pricing_config_version == "v1"
    assert config.config_hash.startswith("sha256:")
    assert config.tables.hour_value == 200
    assert config.tables.efficiency.good_hour_rate == pytest.approx(180.0)


def test_hash_is_independent_of_key_order(tmp_path):
    reordered = dict(reversed(list(RAW_CONFIG.items())))
    target = tmp_path / "pricing.json"
    target.write_text(json.dumps(reordered, indent=4), encoding="utf-8")
    assert load_pricing_config(str(target)).config_hash == load_pricing_config(str(CONFIG_PATH)).config_hash


def test_hash_changes_when_tables_change():
    changed = copy.deepcopy(RAW_CONFIG)
    changed["services"]["decoration"]["tiers"]["1"]["decor1"]["price"] = 1700
    assert parse_pricing_config(changed).config_hash != parse_pricing_config(RAW_CONFIG).config_hash


def test_loaded_tables_are_immutable():
    config = load_pricing_config(str(CONFIG_PATH))
    with pytest.raises(pydantic.ValidationError):
        config.tables.hour_value = 1


def test_missing_file_raises():
    with pytest.raises(FileNotFoundError):
        load_pricing_config("pricing/does_not_exist.json")


def test_invalid_json_raises(tmp_path):
    target = tmp_path / "broken.json"
    target.write_text("{not json", encoding="utf-8")
    with pytest.raises(PricingConfigError):
        load_pricing_config(str(target))


def test_unsorted_area_tiers_are_rejected():
    broken = copy.deepcopy(RAW_CONFIG)
    broken["services"]["design"]["area_tiers"].reverse()
    with pytest.raises(PricingConfigError):
        parse_pricing_config(broken)


def test_negative_tier_price_is_rejected():
    broken = copy.deepcopy(RAW_CONFIG)
    broken["services"]["production"]["tiers"]["2"]["prod1"]["price"] = -10
    with pytest.raises(PricingConfigError):
        parse_pricing_config(broken)


def test_reference_table_lists_every_tier():
    config = load_pricing_config(str(CONFIG_PATH))
    table = build_reference_table(config)
    services = {service.service_type: service for service in table.services}
    assert set(services) == {"decoration", "production", "design"}
    assert len(services["decoration"].tiers) == 9
    assert len(services["production"].tiers) == 6
    assert len(services["design"].area_tiers) == 10
    assert table.target_hour_rate == 200
    first = services["decoration"].tiers[0]
    assert (first.environments, first.complexity, first.price, first.hours) == (1, "decor1", 1600, 8)
    assert first.hour_rate == 200
    assert first.efficiency == Efficiency.excellent


def test_reference_table_flags_underpriced_design_rates():
    table = build_reference_table(load_pricing_config(str(CONFIG_PATH)))
    design = next(service for service in table.services if service.service_type == "design")
    assert all(row.hour_rate == pytest.approx(100.0) for row in design.area_tiers)
    assert all(row.efficiency == Efficiency.adjust for row in design.area_tiers)
