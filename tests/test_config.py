import pytest

from contour_ablation.config import (
    LITS_LABEL_DIR_ENV,
    AblationConfig,
    DatasetConfig,
    resolve_dataset_root,
)
from contour_ablation.errors import ConfigurationError


def test_defaults():
    config = AblationConfig()
    assert config.dataset.foreground_labels == (1, 2)
    assert config.dataset.prefix == "segmentation-"
    assert config.harness.mode == "concurrent"
    assert config.harness.reference == "dense-scan"
    assert "mulberry" in config.harness.variants
    assert config.extraction.mulberry_priority == "raster"


def test_yaml_round_trip(tmp_path):
    config = AblationConfig()
    config.dataset.root = str(tmp_path)
    config.dataset.indices = (3, 1, 2)
    config.dataset.foreground_labels = (2,)
    config.harness.mode = "sequential"
    config.harness.variants = ("dense-scan", "mulberry")
    config.harness.max_workers = 4
    config.extraction.mulberry_priority = "column-major"
    config.verbose = True

    path = tmp_path / "nested" / "ablation.yaml"
    config.save_to_file(str(path))
    loaded = AblationConfig.load_from_file(str(path))

    assert loaded.dataset == config.dataset
    assert loaded.harness == config.harness
    assert loaded.extraction == config.extraction
    assert loaded.verbose is True


def test_partial_yaml_keeps_defaults(tmp_path):
    path = tmp_path / "partial.yaml"
    path.write_text("harness:\n  mode: sequential\n", encoding="utf-8")

    config = AblationConfig.load_from_file(str(path))
    assert config.harness.mode == "sequential"
    assert config.harness.reference == "dense-scan"
    assert config.dataset.foreground_labels == (1, 2)


def test_missing_file_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        AblationConfig.load_from_file(str(tmp_path / "missing.yaml"))


def test_resolve_explicit_root(tmp_path):
    config = DatasetConfig(root=str(tmp_path))
    assert resolve_dataset_root(config, environ={LITS_LABEL_DIR_ENV: "/nowhere"}) == tmp_path


def test_resolve_from_environment(tmp_path):
    root = resolve_dataset_root(DatasetConfig(), environ={LITS_LABEL_DIR_ENV: str(tmp_path)})
    assert root == tmp_path


def test_resolve_from_home(tmp_path):
    label_dir = tmp_path / "dataset" / "train" / "label"
    label_dir.mkdir(parents=True)
    assert resolve_dataset_root(DatasetConfig(), environ={}, home=tmp_path) == label_dir


def test_empty_environment_value_falls_back_to_home(tmp_path):
    label_dir = tmp_path / "dataset" / "train" / "label"
    label_dir.mkdir(parents=True)
    root = resolve_dataset_root(DatasetConfig(), environ={LITS_LABEL_DIR_ENV: ""}, home=tmp_path)
    assert root == label_dir


def test_invalid_root(tmp_path):
    with pytest.raises(ConfigurationError):
        resolve_dataset_root(DatasetConfig(root=str(tmp_path / "absent")), environ={})
    with pytest.raises(ConfigurationError):
        resolve_dataset_root(DatasetConfig(), environ={}, home=tmp_path)
