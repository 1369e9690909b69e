from __future__ import annotations

import os

import pytest
from flask import Flask

from server import create_app
from tail_plugin import Tail
from tail_templates import TEMPLATE_DIR


def test_display_renders_heading_and_data_url(client):
    r = client.get("/tail/display?id=app&curr_pos=0")

    assert r.status_code == 200
    body = r.get_data(as_text=True)
    assert "App Log" in body
    assert "/tail/read/app" in body


def test_display_unknown_id_is_404(client):
    r = client.get("/tail/display?id=nope")

    assert r.status_code == 404
    assert r.get_json() == {"ok": False, "error": "알 수 없는 id: nope"}


def test_display_misconfigured_id_is_500(client):
    r = client.get("/tail/display?id=broken")

    assert r.status_code == 500
    data = r.get_json()
    assert data["ok"] is False
    assert "not properly defined" in data["error"]


def test_read_first_request(client, log_file):
    r = client.get("/tail/read/app?curr_pos=0")

    assert r.status_code == 200
    assert r.get_json() == {
        "new_curr_pos": 10,
        "interval": 3000,
        "output": f"{log_file}\nAAAA\nBBBB\n",
        "available": True,
    }


def test_read_query_form_and_append(client, log_file):
    assert client.get("/tail/read?id=app&curr_pos=10").get_json()["output"] == ""

    with open(log_file, "ab") as f:
        f.write(b"CCCC\n")
    data = client.get("/tail/read?id=app&curr_pos=10").get_json()

    assert data["output"] == "CCCC\n"
    assert data["new_curr_pos"] == 15


def test_read_bad_cursor_is_400(client):
    r = client.get("/tail/read/app?curr_pos=abc")

    assert r.status_code == 400
    assert r.get_json()["ok"] is False


def test_read_unknown_id_is_404(client):
    assert client.get("/tail/read/nope?curr_pos=0").status_code == 404


def test_read_missing_file_degrades(client):
    r = client.get("/tail/read/gone?curr_pos=7")

    assert r.status_code == 200
    assert r.get_json() == {"new_curr_pos": 7, "interval": 3000, "output": "", "available": False}


def test_define_then_read_in_same_session(client, tmp_path):
    job = tmp_path / "job.log"
    job.write_bytes(b"start\n")

    r = client.post("/tail/define", json={"file": str(job), "heading": "Import Job"})
    assert r.status_code == 200
    file_id = r.get_json()["id"]

    data = client.get(f"/tail/read/{file_id}?curr_pos=0").get_json()
    assert data["output"] == f"{job}\nstart\n"
    assert "Import Job" in client.get(f"/tail/display?id={file_id}").get_data(as_text=True)


def test_define_is_session_scoped(app, client, log_file):
    file_id = client.post("/tail/define", json={"file": str(log_file)}).get_json()["id"]

    other = app.test_client()
    assert other.get(f"/tail/read/{file_id}?curr_pos=0").status_code == 404


def test_define_form_body(client, log_file):
    r = client.post("/tail/define", data={"file": str(log_file), "heading": "Form"})

    assert r.status_code == 200
    assert r.get_json()["ok"] is True


def test_define_missing_file_is_400(client, tmp_path):
    r = client.post("/tail/define", json={"file": str(tmp_path / "nope.log")})

    assert r.status_code == 400
    assert r.get_json()["ok"] is False


@pytest.mark.parametrize("body", [{"file": 5}, {"file": ["x"]}, ["x"], "x", 5])
def test_define_bad_json_body_is_400(client, body):
    r = client.post("/tail/define", json=body)

    assert r.status_code == 400
    assert r.get_json()["ok"] is False


def test_define_non_string_heading(client, log_file):
    file_id = client.post("/tail/define", json={"file": str(log_file), "heading": 7}).get_json()["id"]

    assert "<h1>7</h1>" in client.get(f"/tail/display?id={file_id}").get_data(as_text=True)


def test_define_route_absent_when_user_defined_disallowed(make_config, log_file):
    app = create_app(make_config(ALLOW_USER_DEFINED=False,
                                 FILES={"app": {"heading": "App", "file": str(log_file)}}))
    client = app.test_client()

    assert client.post("/tail/define", json={"file": str(log_file)}).status_code in (404, 405)
    assert client.get("/tail/read/app?curr_pos=10").status_code == 200


def test_define_file_to_tail_keyword(make_config, log_file):
    app = Flask(__name__)
    app.secret_key = "test-secret"
    tail = Tail(app, make_config(ALLOW_USER_DEFINED=True))

    @app.route("/start-job")
    def start_job():
        result = tail.define_file_to_tail(str(log_file), "Job")
        return {"id": result.file_id}

    client = app.test_client()
    file_id = client.get("/start-job").get_json()["id"]

    assert client.get(f"/tail/read/{file_id}?curr_pos=10").get_json()["new_curr_pos"] == 10


def test_config_from_app_config_mapping(log_file):
    app = Flask(__name__)
    app.config["TAIL"] = {
        "update_interval": 1000,
        "display": {"url": "/logs/view"},
        "data": {"url": "/logs/read"},
        "files": {"id1": {"heading": "Access", "file": str(log_file)}},
    }
    Tail(app)
    client = app.test_client()

    data = client.get("/logs/read/id1?curr_pos=0").get_json()
    assert data["interval"] == 1000
    assert data["new_curr_pos"] == 10
    assert "/logs/read/id1" in client.get("/logs/view?id=id1").get_data(as_text=True)
    assert app.extensions["tail"].config.DATA_URL == "/logs/read"


def test_status(client):
    data = client.get("/api/status").get_json()

    assert data["ok"] is True
    assert data["files"] == 3
    assert data["user_defined"] is True


def test_templates_ship_inside_package():
    import tail_templates

    assert TEMPLATE_DIR == os.path.dirname(os.path.abspath(tail_templates.__file__))
    assert os.path.isfile(os.path.join(TEMPLATE_DIR, "tail.html"))
    assert os.path.isfile(os.path.join(TEMPLATE_DIR, "tail_base.html"))


def test_display_renders_without_app_templates(tmp_path, log_file, make_config):
    app = Flask(__name__, root_path=str(tmp_path))
    Tail(app, make_config(FILES={"app": {"heading": "App Log", "file": str(log_file)}}))

    r = app.test_client().get("/tail/display?id=app")

    assert r.status_code == 200
    assert "App Log" in r.get_data(as_text=True)
