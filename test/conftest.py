import os
import sys
import pytest
from typing import Dict, Any

# Ensure local package import works for pytest collection.
_TEST_DIR = os.path.dirname(__file__)
_PKG_ROOT = os.path.abspath(os.path.join(_TEST_DIR, ".."))
if _PKG_ROOT not in sys.path:
    sys.path.insert(0, _PKG_ROOT)

# =============================================================================
# Production Config Fixtures
# =============================================================================


def _load_yaml_file(path: str) -> Dict[str, Any]:
    """Load a YAML config file, handling the ros__parameters wrapper."""
    from mcl_localizer.common.param_models import unwrap_ros_parameters
    import yaml
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return unwrap_ros_parameters(data)


@pytest.fixture
def config_path() -> str:
    path = os.path.join(_PKG_ROOT, "config", "localizer.yaml")
    if not os.path.exists(path):
        pytest.skip("config/localizer.yaml not found")
    return path


@pytest.fixture
def prod_config(config_path) -> Dict[str, Any]:
    """Raw parameter dict of the shipped default configuration."""
    return _load_yaml_file(config_path)


# =============================================================================
# Test Utility Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def _reset_warning_throttle():
    """Throttled warnings must not leak between tests."""
    from mcl_localizer.common.logging_utils import reset_throttle
    reset_throttle()
    yield


@pytest.fixture
def rng():
    import numpy as np
    return np.random.default_rng(42)


@pytest.fixture
def small_pointcloud():
    """Generate a small test point cloud."""
    import numpy as np
    np.random.seed(42)
    return np.random.randn(100, 3)


@pytest.fixture
def identity_pose():
    """Return identity SE(3) pose as 6D vector [x, y, z, rx, ry, rz]."""
    import numpy as np
    return np.zeros(6, dtype=np.float64)


@pytest.fixture
def random_pose():
    """Generate a small random SE(3) pose for testing."""
    import numpy as np
    np.random.seed(42)
    trans = np.random.randn(3) * 0.1
    rot = np.random.randn(3) * 0.05
    return np.concatenate([trans, rot])


@pytest.fixture
def room_map():
    """Floor and two walls of a 4 m x 4 m room sampled every 5 cm."""
    import numpy as np
    g = np.arange(0.0, 4.0, 0.05)
    gx, gy = np.meshgrid(g, g, indexing="ij")
    floor = np.stack([gx.ravel(), gy.ravel(), np.zeros(gx.size)], axis=1)
    gz = np.arange(0.0, 2.0, 0.05)
    wy, wz = np.meshgrid(g, gz, indexing="ij")
    wall_x = np.stack([np.zeros(wy.size), wy.ravel(), wz.ravel()], axis=1)
    wall_y = np.stack([wy.ravel(), np.zeros(wy.size), wz.ravel()], axis=1)
    return np.vstack([floor, wall_x, wall_y])
