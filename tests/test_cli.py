import json

from security_scanner import cli

VULNERABLE_JS = 'const password = "hunter2";\nconsole.log("ready");\n'
DEBUG_ONLY_JS = 'console.log("ready");\n'


def test_clean_tree_exits_zero(make_tree, capsys, tmp_path):
    root = make_tree({"src/app.js": "export const add = (a, b) => a + b;\n"})

    exit_code = cli.main([str(root), "--no-report", "--quiet"])

    assert exit_code == cli.EXIT_CLEAN
    assert "Status    : PASS" in capsys.readouterr().out


def test_findings_exit_one_and_write_json_report(make_tree, capsys, tmp_path):
    root = make_tree({"src/app.js": VULNERABLE_JS})
    out_dir = tmp_path / "reports"

    exit_code = cli.main([str(root), "--format", "json", "--out", str(out_dir), "--quiet"])

    assert exit_code == cli.EXIT_FINDINGS
    report = json.loads((out_dir / "security-report.json").read_text(encoding="utf-8"))
    assert [finding["ruleId"] for finding in report["findings"]] == ["RULE-90", "RULE-60-DEBUG"]
    output = capsys.readouterr().out
    assert "Status    : FAIL" in output
    assert "Report (json) written to" in output


def test_fail_on_threshold(make_tree):
    root = make_tree({"src/app.js": DEBUG_ONLY_JS})

    assert cli.main([str(root), "--no-report", "--quiet", "--fail-on", "critical"]) == cli.EXIT_CLEAN
    assert cli.main([str(root), "--no-report", "--quiet", "--fail-on", "low"]) == cli.EXIT_FINDINGS


def test_config_file_is_discovered_in_scan_directory(make_tree):
    root = make_tree(
        {
            "src/app.js": DEBUG_ONLY_JS,
            "vendor/lib.js": VULNERABLE_JS,
            ".securityrc.yaml": "include: ['vendor/**/*.js']\n",
        }
    )

    assert cli.main([str(root), "--no-report", "--quiet", "--fail-on", "critical"]) == cli.EXIT_FINDINGS


def test_custom_rules_directory(make_tree, capsys):
    root = make_tree(
        {
            "src/app.js": "fetch('https://corp.internal/api');\n",
            "policies/internal.yaml": (
                "id: ORG-001\nname: Internal host\nseverity: critical\npattern: 'corp\\.internal'\n"
            ),
        }
    )

    exit_code = cli.main(
        [str(root), "--rules-dir", str(root / "policies"), "--no-report", "--quiet", "--fail-on", "critical"]
    )

    assert exit_code == cli.EXIT_FINDINGS
    assert "ORG-001 Internal host" in capsys.readouterr().out


def test_missing_root_is_a_config_error(tmp_path, capsys):
    exit_code = cli.main([str(tmp_path / "absent"), "--no-report", "--quiet"])

    assert exit_code == cli.EXIT_CONFIG_ERROR
    assert "Configuration error" in capsys.readouterr().err


def test_invalid_config_file_is_a_config_error(tmp_path, capsys):
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("workers: 0\n", encoding="utf-8")

    exit_code = cli.main([str(tmp_path), "--config", str(config_file), "--no-report"])

    assert exit_code == cli.EXIT_CONFIG_ERROR
    assert "workers" in capsys.readouterr().err
