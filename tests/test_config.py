import pytest

from bn_enum.config import EngineConfig, load_config
from bn_enum.cpt import DEFAULT_ROW_SUM_TOLERANCE
from bn_enum.yaml_utils import load_yaml


def test_defaults():
    config = load_config()
    assert config == EngineConfig()
    assert config.precision == 6
    assert config.strict is False
    assert config.row_sum_tolerance == DEFAULT_ROW_SUM_TOLERANCE
    assert config.cpt_style == "listing"


def test_load_from_yaml(tmp_path):
    path = tmp_path / "bn_enum.yaml"
    path.write_text("precision: 4\nstrict: true\nrow_sum_tolerance: 1.0e-3\ncpt_style: ascii\n", encoding="utf-8")
    config = load_config(path)
    assert config.precision == 4
    assert config.strict is True
    assert config.row_sum_tolerance == pytest.approx(1e-3)
    assert config.cpt_style == "ascii"


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_yaml(path) == {}
    assert load_config(path) == EngineConfig()


def test_yaml_must_be_a_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        load_yaml(path)


@pytest.mark.parametrize(
    "data",
    [{"precision": -1}, {"row_sum_tolerance": -0.1}, {"cpt_style": "html"}, {"colour": "blue"}],
)
def test_invalid_values(data):
    with pytest.raises(ValueError):
        EngineConfig.from_dict(data)


def test_updated_ignores_none():
    config = EngineConfig(precision=3).updated(precision=None, strict=True)
    assert config.precision == 3
    assert config.strict is True


def test_updated_validates():
    with pytest.raises(ValueError):
        EngineConfig().updated(cpt_style="fancy")
