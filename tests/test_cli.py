"""Tests for the command-line interface."""

import json

import pytest
import yaml
from click.testing import CliRunner

from storage_monitor import cli as cli_module
from storage_monitor.cli import cli
from storage_monitor.core.models import VolumeInfo


@pytest.fixture
def runner(restore_logging, monkeypatch):
    monkeypatch.setattr(cli_module, "list_volumes", lambda: [VolumeInfo("/", 1000, 400)])
    return CliRunner()


@pytest.fixture
def config_file(tmp_path, sample_tree):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        'monitoring': {
            'enabled': True,
            'paths': [
                {'path': str(sample_tree), 'threshold_type': 'max_used', 'threshold_value': 0},
                {'path': str(sample_tree / "docs"), 'threshold_type': 'max_used', 'threshold_value': 1},
            ],
        },
        'alerts': {'enabled': False, 'custom_message': 'Over quota: {path}'},
        'logging': {'level': 'ERROR'},
    }))
    return str(path)


def test_scan_json_output(runner, sample_tree):
    result = runner.invoke(cli, ['scan', str(sample_tree), '--output', 'json'])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data['current'] == str(sample_tree)
    assert data['parent'] == str(sample_tree.parent)
    assert data['total_size'] == 480
    assert data['total_files'] == 5
    assert [f['name'] for f in data['files']] == ['docs', 'notes.TXT', 'README', 'empty']
    assert data['extensions']['txt'] == {'size': 120, 'count': 2}
    assert data['disk_total'] == 1000
    assert data['disk_available'] == 400


def test_scan_sort_and_limit(runner, sample_tree):
    result = runner.invoke(cli, ['scan', str(sample_tree), '-o', 'json',
                                 '--sort', 'name', '--ascending', '--limit', '2'])

    assert result.exit_code == 0, result.output
    assert [f['name'] for f in json.loads(result.output)['files']] == ['docs', 'empty']


def test_scan_rejects_negative_limit(runner, sample_tree):
    result = runner.invoke(cli, ['scan', str(sample_tree), '-o', 'json', '--limit', '-1'])

    assert result.exit_code == 2
    assert "--limit" in result.output


def test_scan_text_output(runner, sample_tree):
    result = runner.invoke(cli, ['scan', str(sample_tree)])

    assert result.exit_code == 0, result.output
    assert "Total files: 5" in result.output
    assert "Top file types:" in result.output
    assert "Volume /" in result.output


def test_scan_missing_directory_fails(runner, tmp_path):
    result = runner.invoke(cli, ['scan', str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "Error during scan" in result.output


def test_volumes_json(runner):
    result = runner.invoke(cli, ['volumes', '-o', 'json'])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [
        {'mount_point': '/', 'total': 1000, 'used': 600, 'available': 400}
    ]


def test_check_reports_violations(runner, config_file, sample_tree):
    result = runner.invoke(cli, ['-c', config_file, 'check', '--no-notify'])

    assert result.exit_code == 2, result.output
    assert "Checked 2 monitored paths" in result.output
    assert f"Over quota: {sample_tree}" in result.output
    assert f"Over quota: {sample_tree / 'docs'}" not in result.output


def test_check_without_config_fails(runner, tmp_path):
    result = runner.invoke(cli, ['-c', str(tmp_path / "none.yaml"), 'check'])

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_validate_config(runner, config_file):
    result = runner.invoke(cli, ['-c', config_file, 'validate-config'])

    assert result.exit_code == 0, result.output
    assert "Monitored paths: 2" in result.output
    assert "Email: Not configured" in result.output


def test_test_notify_without_email_uses_log(runner, config_file):
    result = runner.invoke(cli, ['-c', config_file, 'test-notify'])

    assert result.exit_code == 0, result.output
    assert "written to the log" in result.output

