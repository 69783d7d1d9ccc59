import pytest

from jobs_eda.report.config_loader import (
    AnalysisConfig,
    default_config_path,
    load_analysis_config,
)


def test_repository_config_loads():
    config = load_analysis_config(str(default_config_path()))

    assert config.salary.high == 100000
    assert config.salary.low == 50000
    assert config.display.bar_chart_words == 50
    assert config.display.wordcloud_min_frequency == 100
    assert config.display.wordcloud_max_words_high == 100
    assert config.display.wordcloud_max_words_low == 200
    assert "experience" in config.stopwords.high
    assert config.geocoding.high_color != config.geocoding.low_color


def test_defaults_for_empty_dict():
    config = AnalysisConfig.from_dict({})

    assert config.salary.high == 100000
    assert config.display.inspect_top_n == 50
    assert config.geocoding.enabled is True
    assert config.stopwords.high == []


def test_partial_sections_override_defaults():
    config = AnalysisConfig.from_dict(
        {
            "salary": {"high": 90000},
            "display": {"top_agencies": 5},
            "geocoding": {"enabled": False, "unknown_key": 1},
            "stopwords": {"low": ["diploma", 7]},
        }
    )

    assert config.salary.high == 90000
    assert config.salary.low == 50000
    assert config.display.top_agencies == 5
    assert config.display.bar_chart_words == 50
    assert config.geocoding.enabled is False
    assert config.stopwords.low == ["diploma", "7"]


def test_overlapping_thresholds_rejected():
    with pytest.raises(ValueError, match="must be below"):
        AnalysisConfig.from_dict({"salary": {"high": 40000, "low": 50000}})


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "analysis.yml"
    path.write_text("")

    config = load_analysis_config(str(path))
    assert config.salary.high == 100000


def test_env_var_selects_config(tmp_path, monkeypatch):
    path = tmp_path / "custom.yml"
    path.write_text("salary:\n  high: 120000\n  low: 40000\n")
    monkeypatch.setenv("JOBS_EDA_CONFIG", str(path))

    config = load_analysis_config()
    assert config.salary.high == 120000
    assert config.salary.low == 40000


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_analysis_config(str(tmp_path / "absent.yml"))


def test_invalid_yaml_raises_value_error(tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("salary: [unclosed\n")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_analysis_config(str(path))
