import io
import json
import os
import sys

import pytest

from cli import compute_insights, env, store_results
from factories import anime, manga


def _lists():
    return {
        "user_id": "42",
        "user_name": "tester",
        "gender": None,
        "anime": [anime("A", score=8, finish="2023-01-01"), anime("B", score=7, finish="2024-01-01")],
        "manga": [manga("M", finish="2024-03-01")],
    }


def test_compute_for_years_keys_by_selector():
    result = compute_insights.compute_for_years(_lists(), ["all", 2024])
    assert set(result) == {"all", "2024"}
    assert result["all"]["anime"]["total"] == 2
    assert result["2024"]["manga"]["total"] == 1


def test_compute_insights_main_all_years(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO(json.dumps(_lists())))
    monkeypatch.setattr(sys, "argv", ["compute_insights", "--all-years"])
    compute_insights.main()
    out = json.loads(capsys.readouterr().out)
    assert out["user_id"] == "42"
    assert list(out["insights"]) == ["all", "2024", "2023"]


def test_compute_insights_rejects_bad_json(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("{not json"))
    monkeypatch.setattr(sys, "argv", ["compute_insights"])
    with pytest.raises(SystemExit):
        compute_insights.main()


def test_store_params():
    data = _lists()
    params = store_results.profile_params(data)
    assert params["mal_user_id"] == "42"
    assert params["anime_count"] == 2
    assert params["manga_json"] == data["manga"]

    rows = store_results.insights_params({"user_id": 42, "insights": {"all": {"x": 1}, "2024": {"x": 2}}})
    assert [r["selected_year"] for r in rows] == ["all", "2024"]
    assert all(r["mal_user_id"] == "42" for r in rows)


def test_load_dotenv_does_not_override(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text('# comment\nMAL_CLIENT_ID="from-file"\nDATABASE_URL=postgres://file\n')
    monkeypatch.setenv("DATABASE_URL", "postgres://env")
    monkeypatch.delenv("MAL_CLIENT_ID", raising=False)

    env.load_dotenv(env_file)

    assert os.environ["MAL_CLIENT_ID"] == "from-file"
    assert os.environ["DATABASE_URL"] == "postgres://env"
    monkeypatch.delenv("MAL_CLIENT_ID")
