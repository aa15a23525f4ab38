from pathlib import Path

from config import DEFAULT_OWNER_ID, Config, get_seed_file, load_config


class TestLoadConfig:
    """Tests for loading configuration."""

    def test_creates_default_file(self, tmp_path):
        """Test that a missing config file is written with defaults."""
        config_path = tmp_path / "finanzas.toml"

        config = load_config(config_path)

        assert config_path.exists()
        assert config.owner_id == DEFAULT_OWNER_ID
        assert config.enable_reset is False
        assert config.db_path.name == "finanzas.db"
        assert load_config(config_path) == config

    def test_reads_sections(self, tmp_path):
        """Test values from every section are picked up."""
        config_path = tmp_path / "finanzas.toml"
        config_path.write_text(
            f'base_dir = "{tmp_path}"\n'
            "enable_reset = true\n"
            "[logging]\n"
            'level = "debug"\n'
            "[categories]\n"
            'owner_id = "alice"\n'
            f'seed_file = "{tmp_path / "seed.json"}"\n'
        )

        config = load_config(config_path)

        assert config.base_dir == tmp_path
        assert config.db_data_dir == tmp_path / "db"
        assert config.log_level == "DEBUG"
        assert config.owner_id == "alice"
        assert config.enable_reset is True
        assert get_seed_file(config) == tmp_path / "seed.json"


class TestSeedFile:
    """Tests for locating the seed file."""

    def test_default_seed_file_ships_with_code(self):
        """Test that the bundled seed file is used without an override."""
        seed_file = get_seed_file()

        assert seed_file.exists()
        assert get_seed_file(Config.from_dict({"base_dir": "/tmp/x"})) == seed_file
        assert Config.from_dict({}).seed_file is None
        assert isinstance(Config.default().base_dir, Path)
