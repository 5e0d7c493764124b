import os
from unittest.mock import patch

import pytest
import yaml

from translation_workbench.models import Table


@pytest.fixture
def sample_map():
    return {
        'app.title': 'Translation Workbench',
        'app.welcome': 'Welcome to the app',
        'button.save': 'Save',
        'button.cancel': 'Cancel',
    }


@pytest.fixture
def sample_multi_map():
    return {
        'en': {'app.title': 'Application', 'button.save': 'Save', 'items.count': '1 item | {n} items'},
        'id': {'app.title': 'Aplikasi', 'button.save': 'Simpan'},
        'zh-CN': {'app.title': '应用程序'},
    }


@pytest.fixture
def sample_table():
    return Table(
        headers=['Key', 'English', 'Indonesian'],
        rows=[
            {'Key': 'app.title', 'English': 'Application', 'Indonesian': 'Aplikasi'},
            {'Key': 'button.save', 'English': 'Save', 'Indonesian': 'Simpan'},
            {'Key': 'button.cancel', 'English': 'Cancel', 'Indonesian': ''},
        ]
    )


@pytest.fixture
def workbench_config_file(tmp_path):
    """
    Write an isolated config.yaml (logging into tmp_path, no console output) and
    point WORKBENCH_CONFIG_FILE at it for the duration of the test.
    """
    config = {
        'supported_locales': [
            {'code': 'en', 'name': 'English'},
            {'code': 'id', 'name': 'Indonesian'},
            {'code': 'zh-CN', 'name': 'Chinese Simplified'},
            {'code': 'zh-TW', 'name': 'Chinese Traditional'},
        ],
        'search': {'threshold': 0.3, 'max_results': 50},
        'upload': {'max_file_size_mb': 10},
        'logging': {
            'log_level': 'DEBUG',
            'log_file_path': str(tmp_path / 'logs' / 'workbench.log'),
            'log_to_console': False,
        },
    }
    config_path = tmp_path / 'config.yaml'
    config_path.write_text(yaml.safe_dump(config), encoding='utf-8')

    with patch.dict(os.environ, {'WORKBENCH_CONFIG_FILE': str(config_path)}):
        with patch('translation_workbench.app_config._load_dotenv_files', return_value=None):
            yield config_path
