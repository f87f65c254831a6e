"""Central pytest configuration and fixtures for the test suite."""

import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.utils.audio_test_utils import AudioFileGenerator


@pytest.fixture
def temp_audio_dir(tmp_path):
    """Per-test directory for generated audio files."""
    audio_dir = tmp_path / "audio"
    audio_dir.mkdir()
    return audio_dir


@pytest.fixture
def stereo_file(temp_audio_dir):
    """2-channel, 16-bit, 4-frame source: ch0=[1,2,3,4], ch1=[10,20,30,40]."""
    return AudioFileGenerator.create_pcm_file(
        temp_audio_dir / "stereo.wav", [[1, 2, 3, 4], [10, 20, 30, 40]], bits_per_sample=16
    )


@pytest.fixture
def ramp_file(temp_audio_dir):
    """2-channel, 16-bit, 2500-frame ramp at 1kHz."""
    return AudioFileGenerator.create_ramp_file(temp_audio_dir / "ramp.wav")
