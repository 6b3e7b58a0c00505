import json

from typer.testing import CliRunner

from editprompt import __version__
from editprompt.main import app

from conftest import make_input

runner = CliRunner()

DEFAULT_PROMPT = (
    "<|file_sep|>related.rs\n"
    "fn helper() {}\n"
    "<|file_sep|>edit history\n"
    "--- a/a.rs\n"
    "+++ b/a.rs\n"
    "-old\n"
    "+new\n"
    "<|file_sep|>test.rs\n"
    "<|fim_prefix|>\n"
    "prefix\n"
    "<|fim_middle|>current\n"
    "edi<|user_cursor|>table\n"
    "<|fim_suffix|>\n"
    "\n"
    "suffix\n"
    "<|fim_middle|>updated\n"
)


def test_render_default_format(request_file):
    result = runner.invoke(app, ["render", str(request_file)])
    assert result.exit_code == 0
    assert result.stdout == DEFAULT_PROMPT


def test_render_from_stdin(basic_input):
    result = runner.invoke(app, ["render", "-"], input=basic_input.to_json())
    assert result.exit_code == 0
    assert result.stdout == DEFAULT_PROMPT


def test_render_json(request_file):
    result = runner.invoke(app, ["render", str(request_file), "--format", "prefill", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["format"] == "V0211Prefill"
    assert payload["prompt"].endswith("<|fim_middle|>")
    assert payload["prefill"] == ""
    assert payload["stats"]["events_included"] == 1


def test_render_with_budget(request_file):
    result = runner.invoke(app, ["render", str(request_file), "-t", "30", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["prompt"].startswith("<|file_sep|>test.rs\n")
    assert payload["stats"]["over_budget"] is True


def test_render_unknown_format(request_file):
    result = runner.invoke(app, ["render", str(request_file), "--format", "V0211"])
    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["status"] == "error"
    assert payload["code"] == "FORMAT_NOT_FOUND"
    assert "matched more than one of" in payload["message"]
    assert "V0211SeedCoder" in payload["suggestions"]


def test_render_missing_file(tmp_path):
    result = runner.invoke(app, ["render", str(tmp_path / "nope.json")])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["code"] == "FILE_NOT_FOUND"


def test_render_invalid_input(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"cursor_path": "a"}', encoding="utf-8")
    result = runner.invoke(app, ["render", str(path)])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["code"] == "INVALID_INPUT"


def test_render_undecodable_file(tmp_path):
    path = tmp_path / "request.json"
    path.write_bytes(b"\xff\xfe{")
    result = runner.invoke(app, ["render", str(path)])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["code"] == "INVALID_INPUT"


def test_clean_undecodable_file(tmp_path):
    path = tmp_path / "output.txt"
    path.write_bytes(b"caf\xe9\n")
    result = runner.invoke(app, ["clean", str(path)])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["code"] == "INVALID_INPUT"


def test_render_bad_ranges(tmp_path):
    path = tmp_path / "request.json"
    path.write_text(make_input("abc", (0, 40), 0).to_json(), encoding="utf-8")
    result = runner.invoke(app, ["render", str(path)])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["code"] == "ExcerptRangeError"


def test_prefill(tmp_path):
    editable = "fn main() {\n" + "    let x = 1;\n" * 10
    path = tmp_path / "request.json"
    path.write_text(make_input(editable, (0, len(editable)), 0).to_json(), encoding="utf-8")
    result = runner.invoke(app, ["prefill", str(path), "--format", "V0211Prefill"])
    assert result.exit_code == 0
    assert result.stdout == "fn main() {\n"


def test_clean_format_output(tmp_path):
    path = tmp_path / "output.txt"
    path.write_text("new code\n>>>>>>> UPDATED\n", encoding="utf-8")
    result = runner.invoke(app, ["clean", str(path), "-f", "seedcoder"])
    assert result.exit_code == 0
    assert result.stdout == "new code\n"


def test_clean_legacy_output():
    output = "<|editable_region_start|>\nfn main() {\n    <|user_cursor_is_here|>x();\n}\n<|editable_region_end|>\n"
    result = runner.invoke(app, ["clean", "-", "--legacy"], input=output)
    assert result.exit_code == 0
    assert result.stdout == "fn main() {\n    <|user_cursor|>x();\n}"


def test_check_tokens_clean(request_file):
    result = runner.invoke(app, ["check-tokens", str(request_file)])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload == {"format": "V0114180EditableRegion", "contains_special_tokens": False, "tokens": []}


def test_check_tokens_collision(tmp_path):
    path = tmp_path / "request.json"
    path.write_text(make_input("a <|fim_prefix|> b\n", (0, 19), 0).to_json(), encoding="utf-8")
    result = runner.invoke(app, ["check-tokens", str(path)])
    assert result.exit_code == 2
    assert json.loads(result.stdout)["tokens"] == ["<|fim_prefix|>"]


def test_check_tokens_human_shows_bracket_tokens(tmp_path):
    path = tmp_path / "request.json"
    excerpt = "a <[fim-suffix]> b\n"
    path.write_text(make_input(excerpt, (0, len(excerpt)), 0).to_json(), encoding="utf-8")
    result = runner.invoke(app, ["--human", "check-tokens", str(path), "-f", "seedcoder"])
    assert result.exit_code == 2
    assert "<[fim-suffix]>" in result.stdout


def test_legacy(request_file):
    result = runner.invoke(app, ["legacy", str(request_file)])
    assert result.exit_code == 0
    assert result.stdout.startswith("### Instruction:\n")
    assert "User edited a.rs:\n```diff\n-old\n+new\n\n```" in result.stdout
    assert "<|editable_region_start|>\nedi<|user_cursor_is_here|>table\n<|editable_region_end|>" in result.stdout
    assert result.stdout.endswith("### Response:\n")


def test_legacy_sub_ranges(request_file):
    result = runner.invoke(app, ["legacy", str(request_file), "--editable", "7:15", "--context", "7:22"])
    assert result.exit_code == 0
    assert "```test.rs\n<|editable_region_start|>\nedi" in result.stdout


def test_legacy_bad_range_option(request_file):
    result = runner.invoke(app, ["legacy", str(request_file), "--editable", "seven"])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["code"] == "INVALID_RANGE"


def test_formats_json():
    result = runner.invoke(app, ["formats"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["default"] == "V0114180EditableRegion"
    assert len(payload["formats"]) == 7
    assert payload["formats"][0]["name"] == "V0112MiddleAtEnd"


def test_formats_human():
    result = runner.invoke(app, ["--human", "formats"])
    assert result.exit_code == 0
    assert "Prompt formats" in result.stdout
    assert not result.stdout.startswith("{")
    assert "<[fim-suffix]>" in result.stdout
    assert "<|fim_prefix|>" in result.stdout


def test_config_reflects_environment(monkeypatch):
    monkeypatch.setenv("EDITPROMPT_MAX_PROMPT_TOKENS", "2048")
    result = runner.invoke(app, ["config"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["max_prompt_tokens"] == 2048


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == f"editprompt v{__version__}"
