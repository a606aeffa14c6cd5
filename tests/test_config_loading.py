import json

import pytest

from snfclust.config import SNFConfig, load_json_config
from snfclust.exceptions import InvalidInput


def test_defaults():
    config = SNFConfig()
    assert config.K == 20
    assert config.t == 20
    assert config.alpha == 0.5
    assert config.self_weight == 0.5
    assert config.random_state == 0
    assert config.standardize


def test_replace_validates_new_values():
    config = SNFConfig().replace(K=7, t=3)
    assert (config.K, config.t) == (7, 3)
    with pytest.raises(InvalidInput, match="alpha"):
        SNFConfig().replace(alpha=-1.0)


@pytest.mark.parametrize(
    "changes",
    [{"K": 0}, {"t": 0}, {"self_weight": 1.0}, {"n_init": 0}, {"max_iter": -1}],
)
def test_invalid_values_raise(changes):
    with pytest.raises(InvalidInput):
        SNFConfig(**changes)


def test_round_trip_through_dict():
    config = SNFConfig(K=12, n_jobs=2)
    assert SNFConfig.from_dict(config.to_dict()) == config


def test_unknown_keys_are_rejected():
    with pytest.raises(ValueError, match="Unknown config keys: beta"):
        SNFConfig.from_dict({"K": 5, "beta": 1})


def test_load_json_config(tmp_path):
    path = tmp_path / "run.json"
    path.write_text(json.dumps({"K": 15, "t": 10, "alpha": 0.4}), encoding="utf-8")
    config = load_json_config(path)
    assert config.K == 15
    assert config.t == 10
    assert config.alpha == 0.4
    assert config.n_init == SNFConfig().n_init


def test_load_json_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_json_config(tmp_path / "missing.json")


def test_load_json_config_rejects_other_formats(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("K: 10\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Use a .json config file"):
        load_json_config(path)


def test_load_json_config_reports_decode_position(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text('{"K": 10,,}', encoding="utf-8")
    with pytest.raises(ValueError, match="line 1, column"):
        load_json_config(path)


def test_load_json_config_requires_object_root(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(ValueError, match="expected JSON object"):
        load_json_config(path)
