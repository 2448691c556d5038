from pathlib import Path

from chatwarden.configuration.app_configuration import AppConfig


def write_config(tmp_path: Path, text: str) -> Path:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    path = config_dir / "app_config.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_falls_back_to_defaults(tmp_path):
    config = AppConfig(tmp_path / "config" / "missing.yml")

    assert config.data == {}
    assert config.admin_channel_id is None
    assert config.command_prefix == "/"
    assert config.ban_threshold == 2
    assert config.warning_delete_delay == 5.0
    assert config.phrases_path == (tmp_path / "data" / "blacklist.json").resolve()
    assert config.violations_path == (tmp_path / "data" / "violations.json").resolve()


def test_values_are_read_from_yaml(tmp_path):
    path = write_config(
        tmp_path,
        """
storage:
  data_dir: state
  phrases_file: words.json
  violations_file: strikes.json
moderation:
  admin_channel_id: "123456789012345678"
  command_prefix: "!"
  ban_threshold: 3
  warning_delete_delay_seconds: 2.5
""",
    )

    config = AppConfig(path)

    assert config.phrases_path == (tmp_path / "state" / "words.json").resolve()
    assert config.violations_path == (tmp_path / "state" / "strikes.json").resolve()
    assert config.admin_channel_id == 123456789012345678
    assert config.command_prefix == "!"
    assert config.ban_threshold == 3
    assert config.warning_delete_delay == 2.5


def test_absolute_data_dir_is_kept(tmp_path):
    data_dir = tmp_path / "elsewhere"
    path = write_config(tmp_path, f"storage:\n  data_dir: {data_dir}\n")

    assert AppConfig(path).data_dir == data_dir


def test_invalid_values_use_defaults(tmp_path):
    path = write_config(
        tmp_path,
        """
moderation:
  admin_channel_id: not-a-number
  ban_threshold: lots
  warning_delete_delay_seconds: soon
""",
    )

    config = AppConfig(path)

    assert config.admin_channel_id is None
    assert config.ban_threshold == 2
    assert config.warning_delete_delay == 5.0


def test_non_mapping_yaml_is_ignored(tmp_path):
    path = write_config(tmp_path, "- just\n- a list\n")

    assert AppConfig(path).data == {}


def test_reload_picks_up_changes(tmp_path):
    path = write_config(tmp_path, "moderation:\n  ban_threshold: 4\n")
    config = AppConfig(path)
    assert config.ban_threshold == 4

    path.write_text("moderation:\n  ban_threshold: 5\n", encoding="utf-8")
    config.reload()

    assert config.ban_threshold == 5
