"""Tests for the command line entry point."""

import json
import os
from unittest.mock import patch

import pytest

from main import main
from tests.base.base_test import BaseTest
from tests.utils.audio_test_utils import AudioFileGenerator, read_channels


@pytest.fixture
def clean_env():
    with patch.dict(os.environ, {}, clear=True), patch("main.load_dotenv"):
        yield


class TestMainCli(BaseTest):
    """process and stats subcommands."""

    def test_process_command(self, stereo_file, temp_audio_dir, clean_env):
        output = temp_audio_dir / "cli_out.wav"
        exit_code = main([
            "process", str(stereo_file), str(output),
            "--op", "0:1", "--op", "1:0:adjust", "--chunk-ms", "2", "--gain-db", "20",
        ])

        assert exit_code == 0
        channels, _, _ = read_channels(output)
        assert channels == [[100, 200, 300, 400], [1, 2, 3, 4]]

    def test_process_with_channel_count(self, stereo_file, temp_audio_dir, clean_env):
        output = temp_audio_dir / "mono.wav"
        assert main(["process", str(stereo_file), str(output), "--op", "1:0", "--channels", "1"]) == 0

        channels, _, _ = read_channels(output)
        assert channels == [[10, 20, 30, 40]]

    def test_stats_json(self, temp_audio_dir, clean_env, capsys):
        source = AudioFileGenerator.create_pcm_file(temp_audio_dir / "s.wav", [[1, 3, 5, 7]])
        assert main(["stats", str(source), "--chunk-ms", "4", "--json"]) == 0

        result = json.loads(capsys.readouterr().out)
        assert result["channels"][0]["means"] == [4]
        assert result["channels"][0]["average_deltas"] == [2]

    def test_stats_table(self, stereo_file, clean_env, capsys):
        assert main(["stats", str(stereo_file), "--chunk-ms", "4"]) == 0

        out = capsys.readouterr().out
        assert "Channel 0" in out
        assert "chunk 0: mean=2 avg_delta=1" in out
        assert "chunk 0: mean=25 avg_delta=10" in out

    def test_missing_input_fails(self, temp_audio_dir, clean_env):
        assert main(["stats", str(temp_audio_dir / "missing.wav")]) == 1

    def test_bad_operation_fails(self, stereo_file, temp_audio_dir, clean_env):
        assert main(["process", str(stereo_file), str(temp_audio_dir / "o.wav"), "--op", "x:y"]) == 1

    def test_unsupported_input_fails(self, temp_audio_dir, clean_env):
        path = AudioFileGenerator.create_float_file(temp_audio_dir / "f.wav")
        assert main(["stats", str(path)]) == 1
