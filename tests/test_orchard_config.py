from __future__ import annotations

from pathlib import Path

import pytest

from orchard.config import (
    ORCHARD_CFG_NAME,
    ORCHARD_CFG_SIZE,
    ORCHARD_CFG_STRUCT,
    SearchParams,
    default_orchard_cfg_data,
    ensure_orchard_cfg,
    load_orchard_cfg,
)


def test_orchard_cfg_struct_size() -> None:
    assert ORCHARD_CFG_STRUCT.sizeof() == ORCHARD_CFG_SIZE == 0x54


def test_default_orchard_cfg_matches_search_defaults() -> None:
    data = default_orchard_cfg_data()

    assert data["version"] == 1
    assert data["initial_pool"] == 80
    assert data["parent_pool"] == 5
    assert data["children"] == 3
    assert data["generations"] == 5
    assert data["max_apples"] == 500
    assert data["diff_target"] == pytest.approx(0.02)
    assert data["scale_exponent_min"] == -6.5
    assert data["background"] == 255
    assert data["seed_enabled"] == 0
    assert data["playback_fps"] == 12
    assert data["frame_step"] == 10


def test_ensure_orchard_cfg_creates_file_once(tmp_path: Path) -> None:
    config = ensure_orchard_cfg(tmp_path)

    path = tmp_path / ORCHARD_CFG_NAME
    assert config.path == path
    assert path.stat().st_size == ORCHARD_CFG_SIZE
    assert config.frame_size is None
    assert config.seed is None

    config.seed = 1234
    config.frame_size = (64, 36)
    config.save()

    reloaded = ensure_orchard_cfg(tmp_path)
    assert reloaded.seed == 1234
    assert reloaded.frame_size == (64, 36)


def test_search_params_round_trip_through_cfg(tmp_path: Path) -> None:
    config = ensure_orchard_cfg(tmp_path)
    config.set_search_params(SearchParams(initial_pool=12, max_apples=40, diff_target=0.5, sample_spacing=2))
    config.save()

    params = load_orchard_cfg(config.path).search_params()

    assert params.initial_pool == 12
    assert params.max_apples == 40
    assert params.diff_target == 0.5
    assert params.sample_spacing == 2


def test_ensure_orchard_cfg_patches_zero_rates(tmp_path: Path) -> None:
    config = ensure_orchard_cfg(tmp_path)
    config.data["playback_fps"] = 0
    config.data["frame_step"] = 0
    config.path.write_bytes(ORCHARD_CFG_STRUCT.build(config.data))

    patched = ensure_orchard_cfg(tmp_path)

    assert patched.playback_fps == 12
    assert patched.frame_step == 10
    assert load_orchard_cfg(patched.path).playback_fps == 12


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        (b"ORCH" + b"\x00" * 4, "unexpected size"),
        (b"NOPE" + b"\x00" * (ORCHARD_CFG_SIZE - 4), "bad magic"),
        (b"ORCH" + b"\x02" + b"\x00" * (ORCHARD_CFG_SIZE - 5), "unsupported config version"),
    ],
)
def test_load_orchard_cfg_rejects_bad_files(tmp_path: Path, payload: bytes, message: str) -> None:
    path = tmp_path / ORCHARD_CFG_NAME
    path.write_bytes(payload)

    with pytest.raises(ValueError, match=message):
        load_orchard_cfg(path)


def test_search_params_bound_evaluations() -> None:
    assert SearchParams().max_evaluations == 155
    assert SearchParams(initial_pool=10, parent_pool=2, children=4, generations=3).max_evaluations == 34


def test_search_params_validation() -> None:
    with pytest.raises(ValueError, match="initial_pool"):
        SearchParams(initial_pool=0)
    with pytest.raises(ValueError, match="diff_target"):
        SearchParams(diff_target=1.5)
    with pytest.raises(ValueError, match="inverted"):
        SearchParams(scale_exponent_min=0.0, scale_exponent_max=-1.0)


def test_search_params_overrides_skip_none_and_reject_unknown() -> None:
    params = SearchParams().with_overrides(max_apples=20, diff_target=None)

    assert params.max_apples == 20
    assert params.diff_target == 0.02
    with pytest.raises(ValueError, match="unknown search parameters"):
        SearchParams().with_overrides(population=3)
