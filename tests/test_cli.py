import json

import pytest

import h2j_cli
from conftest import SAMPLE_MESSAGE


@pytest.fixture
def message_file(tmp_path):
    path = tmp_path / "message.hl7"
    path.write_text(SAMPLE_MESSAGE.replace("\r", "\n"), encoding="utf-8")
    return str(path)


def test_direct_mapping_to_stdout(message_file, capsys):
    assert h2j_cli.main([message_file]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["MSH"]["message_control_id"] == "MSG00001"
    assert output["MSH"]["field_separator"] == "|"


def test_direct_mapping_to_file(message_file, tmp_path, capsys):
    output_file = tmp_path / "out" / "message.json"
    assert h2j_cli.main([message_file, str(output_file)]) == 0
    assert "Conversion successful" in capsys.readouterr().out
    assert json.loads(output_file.read_text())["PID"]["administrative_sex"] == "M"


def test_template_mapping_with_concat(message_file, capsys):
    assert h2j_cli.main([message_file, "--template", "simpleTemplate.json", "--concat", "; "]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["patient"]["ids"] == "A123; B456"


def test_analyze_json(message_file, capsys):
    assert h2j_cli.main(["--analyze", "--json", message_file]) == 0
    analysis = json.loads(capsys.readouterr().out)
    assert analysis["segment_counts"]["OBX"] == 3


def test_analyze_text(message_file, capsys):
    assert h2j_cli.main(["--analyze", message_file]) == 0
    out = capsys.readouterr().out
    assert "HL7 MESSAGE ANALYSIS" in out
    assert "MSG00001" in out


def test_trace_log_from_config(message_file, tmp_path, capsys):
    config_file = tmp_path / "h2j_config.json"
    config_file.write_text(json.dumps({
        "trace_log": {"enabled": True, "verbosity": "detailed", "output_directory": str(tmp_path / "logs")}
    }))
    assert h2j_cli.main([message_file, "--config", str(config_file), "-v"]) == 0
    assert "Trace log written" in capsys.readouterr().out
    logs = list((tmp_path / "logs").glob("message_*.md"))
    assert len(logs) == 1
    assert "OBX-5 decoded as CWE" in logs[0].read_text(encoding="utf-8")


def test_missing_message_file(tmp_path, capsys):
    assert h2j_cli.main([str(tmp_path / "missing.hl7")]) == 1
    assert "File Error" in capsys.readouterr().out


def test_not_hl7(tmp_path, capsys):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    assert h2j_cli.main([str(path)]) == 1
    assert "HL7 Parsing Error" in capsys.readouterr().out


def test_missing_profile(message_file, capsys):
    assert h2j_cli.main([message_file, "--profile", "Missing.json"]) == 1
    assert "Configuration Error" in capsys.readouterr().out


def test_missing_template(message_file, capsys):
    assert h2j_cli.main([message_file, "--template", "Missing.json"]) == 1
    assert "Template Error" in capsys.readouterr().out


def test_unsupported_template(message_file, tmp_path, capsys):
    template = tmp_path / "nested.json"
    template.write_text(json.dumps({"rows": [{"codes": ["OBX-3"]}]}))
    assert h2j_cli.main([message_file, "--template", str(template)]) == 1
    out = capsys.readouterr().out
    assert "Unsupported Template" in out
    assert "$.rows[*].codes" in out


def test_invalid_config(message_file, tmp_path, capsys):
    config_file = tmp_path / "bad.json"
    config_file.write_text("{broken")
    assert h2j_cli.main([message_file, "--config", str(config_file)]) == 1
    assert "Configuration Error" in capsys.readouterr().out


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        h2j_cli.main(["--version"])
    assert excinfo.value.code == 0
    assert "h2j-hl7-json v1.0.0" in capsys.readouterr().out
