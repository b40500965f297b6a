#!/usr/bin/env python3
"""
Command line tests
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging

import pytest
import yaml

from pbrqos import cli

CONFIG_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
                           'config', 'pbr_config.yaml')


@pytest.fixture(autouse=True)
def reset_node_logger():
    yield
    node_logger = logging.getLogger('pbrqos')
    for handler in list(node_logger.handlers):
        node_logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def config_file(tmp_path):
    with open(CONFIG_PATH) as f:
        data = yaml.safe_load(f)
    data['logging']['log_dir'] = str(tmp_path / 'logs')
    path = tmp_path / 'pbr_config.yaml'
    path.write_text(yaml.safe_dump(data))
    return str(path)


def test_show_table(config_file, capsys):
    """Test --show-table prints the policies"""
    assert cli.main(['--config', config_file, '--show-table']) == 0

    out = capsys.readouterr().out
    assert "Policy-Based Routing Active" in out
    assert "via 10.0.2.2 if 2" in out


def test_flows_report(config_file, tmp_path, capsys):
    """Test --flows prints and saves the report"""
    snapshot = tmp_path / 'flows.csv'
    snapshot.write_text(
        "flow_id,source_port,destination_port,tx_packets,rx_packets,delay_sum_s,jitter_sum_s\n"
        "1,9,9,100,100,0.5,0.01\n"
        "2,10,10,100,50,5.0,\n"
    )
    output_dir = tmp_path / 'results'

    rc = cli.main(['--config', config_file, '--flows', str(snapshot),
                    '--output-dir', str(output_dir)])

    assert rc == 0
    assert "QoS PERFORMANCE VERIFICATION" in capsys.readouterr().out
    assert (output_dir / 'metrics_summary.txt').exists()
    assert (output_dir / 'metrics_summary.csv').exists()


def test_unmatched_route_without_fallback(config_file, caplog):
    """Test an unmatched marking with no fallback routing attached"""
    assert cli.main(['--config', config_file, '--route', 'AF41', '10.0.9.1']) == 0

    assert "[QOS] DSCP 34 classified as unclassified" in caplog.text
    assert "no route (ERROR_NOROUTETOHOST)" in caplog.text


def test_missing_config(tmp_path):
    """Test a missing configuration file exits with an error"""
    assert cli.main(['--config', str(tmp_path / 'missing.yaml')]) == 1


def test_malformed_yaml(tmp_path):
    """Test unparseable YAML exits with an error"""
    path = tmp_path / 'pbr_config.yaml'
    path.write_text("node: [unclosed\n")

    assert cli.main(['--config', str(path)]) == 1


def test_wrongly_shaped_config(tmp_path, capsys):
    """Test a section of the wrong type exits with an error"""
    path = tmp_path / 'pbr_config.yaml'
    path.write_text("node: [1, 2]\n")

    assert cli.main(['--config', str(path)]) == 1
    assert "node must be a mapping" in capsys.readouterr().err


def test_unknown_logging_level(tmp_path):
    """Test an unknown logging level exits with an error"""
    with open(CONFIG_PATH) as f:
        data = yaml.safe_load(f)
    data['logging']['level'] = 'VERBOSE'
    data['logging']['log_dir'] = str(tmp_path / 'logs')
    path = tmp_path / 'pbr_config.yaml'
    path.write_text(yaml.safe_dump(data))

    assert cli.main(['--config', str(path)]) == 1


if __name__ == '__main__':
    sys.exit(pytest.main([__file__, '-v']))
