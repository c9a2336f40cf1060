from __future__ import annotations

import re
from pathlib import Path

from conftest import StubVisualizer, link_href
from fastapi.testclient import TestClient

from replview.api.main import create_app
from replview.config import AppConfig, VisualizerOptions

NESTED = '{"hello": {"there": {"my": ["friend", {"name": "Rich"}, "!"]}}}'


def _eval(client: TestClient, code: str) -> str:
    """Evaluate through the HTML form and return the resulting page."""
    response = client.post("/eval", data={"code": code})
    assert response.status_code == 200
    return response.text


def _current(client: TestClient) -> dict:
    response = client.get("/v1/results/current")
    assert response.status_code == 200
    return response.json()


def test_health(client: TestClient) -> None:
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["visualizers_loaded"] == 5


def test_list_visualizers(client: TestClient) -> None:
    labels = [v["label"] for v in client.get("/v1/visualizers").json()]
    assert labels == ["Result", "Table", "File", "Throwable", "Chart"]


def test_table_data_is_escaped_and_key_click_descends(client: TestClient) -> None:
    _eval(client, '{"foo": 1, "bar": "<script>alert(2)</script>"}')

    page = client.get("/", params={"v": "Table"}).text
    assert "<script>alert(2)</script>" not in page
    assert "<td><a" in page and "&lt;script&gt;alert(2)&lt;/script&gt;" in page

    page = client.get(link_href(page, "bar")).text
    assert "<script>alert(2)</script>" not in page

    current = _current(client)
    assert current["trail"] == "bar;"
    assert current["value_type"] == "str"


def test_breadcrumbs_through_html(client: TestClient) -> None:
    page = _eval(client, NESTED)
    assert 'class="breadcrumbs"' not in page

    page = client.get(link_href(page, "hello")).text
    assert _current(client)["trail"] == "hello;"
    page = client.get(link_href(page, "there")).text
    page = client.get(link_href(page, "my")).text
    assert _current(client)["trail"] == "hello;there;my;"

    page = client.get(link_href(page, '<span class="scalar">&#39;friend&#39;</span>')).text
    assert _current(client)["trail"] == "hello;there;my;0;"

    # breadcrumb back to "hello"
    page = client.get(link_href(page, "hello")).text
    assert _current(client)["trail"] == "hello;"

    # root breadcrumb, the trail disappears
    page = client.get(link_href(page, "root")).text
    assert _current(client)["trail"] == ""
    assert 'class="breadcrumbs"' not in page


def test_navigation_through_json_api(client: TestClient) -> None:
    result_id = client.post("/v1/eval", json={"code": NESTED}).json()["result_id"]

    for key in ["hello", "there", "my", 1]:
        response = client.post(f"/v1/results/{result_id}/descend", json={"key": key})
        assert response.status_code == 200
    summary = response.json()
    assert summary["trail"] == "hello;there;my;1;"
    assert summary["applicable"][0] == "Result"
    assert "Chart" not in summary["applicable"]

    summary = client.post(f"/v1/results/{result_id}/ascend", json={"index": 1}).json()
    assert summary["breadcrumbs"] == ["hello"]
    assert summary["depth"] == 2


def test_bad_navigation_is_rejected_without_state_change(client: TestClient) -> None:
    result_id = client.post("/v1/eval", json={"code": "[1, 2]"}).json()["result_id"]
    client.post(f"/v1/results/{result_id}/descend", json={"key": 0})

    assert client.post(f"/v1/results/{result_id}/ascend", json={"index": 5}).status_code == 400
    assert client.post(f"/v1/results/{result_id}/descend", json={"key": "x"}).status_code == 400
    assert client.get(f"/results/{result_id}/breadcrumbs/9").status_code == 400
    assert _current(client)["trail"] == "0;"


def test_superseded_result_is_not_found(client: TestClient) -> None:
    old_id = client.post("/v1/eval", json={"code": "{'a': 1}"}).json()["result_id"]
    client.post("/v1/eval", json={"code": "2"})

    assert client.post(f"/v1/results/{old_id}/descend", json={"key": "a"}).status_code == 404
    assert client.get(f"/results/{old_id}/actions/a1").status_code == 404
    assert client.get(f"/v1/results/{old_id}/view").status_code == 404


def test_unknown_action_is_not_found(client: TestClient) -> None:
    result_id = client.post("/v1/eval", json={"code": "1"}).json()["result_id"]
    assert client.get(f"/results/{result_id}/actions/a999").status_code == 404


def test_sessions_are_isolated(config: AppConfig) -> None:
    app = create_app(config)
    with TestClient(app) as alice, TestClient(app) as bob:
        alice.post("/v1/eval", json={"code": "secret = 41\nsecret + 1"})
        assert bob.get("/v1/results/current").status_code == 404

        bob_result = bob.post("/v1/eval", json={"code": "secret"}).json()
        assert bob_result["failed"] is True
        assert bob_result["value_type"] == "NameError"
        assert alice.get("/v1/results/current").json()["code"] == "secret = 41\nsecret + 1"


def test_delete_session_discards_results(client: TestClient) -> None:
    client.post("/v1/eval", json={"code": "1"})
    assert client.delete("/v1/session").status_code == 204
    assert client.get("/v1/results/current").status_code == 404


def test_table_filter_over_http(client: TestClient) -> None:
    code = (
        "rows = [['Index', 'Name', 'Country']]\n"
        "rows += [[str(i), 'Customer %d' % i, 'Fiji' if i == 7 else 'Peru'] for i in range(1, 101)]\n"
        "rows"
    )
    result_id = client.post("/v1/eval", json={"code": code}).json()["result_id"]

    view = client.get(f"/v1/results/{result_id}/view", params={"v": "Table"}).json()
    assert view["selected"] == "Table"
    assert view["tabs"] == ["Result", "Table"]
    assert view["html"].count("<tr") - 1 == 20

    view = client.get(
        f"/v1/results/{result_id}/view", params={"v": "Table", "filter": "Fiji"}
    ).json()
    assert view["html"].count("<tr") - 1 == 1


def test_file_download_is_single_use(client: TestClient, tmp_path: Path) -> None:
    target = tmp_path / "data.bin"
    target.write_bytes(b"\x00\x01payload" * 1000)

    page = _eval(client, f"__import__('pathlib').Path({str(target)!r})")
    assert _current(client)["applicable"][0] == "File"

    page = client.get(link_href(page, "Download")).text
    url = link_href(page, "Download here")
    assert "/file-visualizer/download?id=" in url

    response = client.get(url)
    assert response.status_code == 200
    assert response.content == target.read_bytes()
    assert response.headers["content-type"] == "application/octet-stream"
    assert response.headers["content-disposition"] == "attachment; filename=data.bin"

    replay = client.get(url)
    assert replay.status_code == 404
    assert replay.content == b""


def test_download_with_unknown_token_is_404(client: TestClient) -> None:
    for url in ["/file-visualizer/download?id=nope", "/file-visualizer/download"]:
        response = client.get(url)
        assert response.status_code == 404
        assert response.content == b""


def test_exception_results_show_throwable_and_cause(client: TestClient) -> None:
    page = _eval(client, "raise ValueError('outer') from KeyError('inner')")
    current = _current(client)
    assert current["failed"] is True
    assert current["applicable"][0] == "Throwable"

    href = re.search(r'<b>Cause: </b><a href="([^"]+)">', page).group(1)
    client.get(href)
    assert _current(client)["trail"] == "KeyError;"


def test_render_fault_is_shown_and_session_survives(config: AppConfig) -> None:
    broken = StubVisualizer("Broken", precedence=200, fail_render=True)
    with TestClient(create_app(config, extra_visualizers=[broken])) as client:
        page = _eval(client, "{'a': 1}")
        assert 'class="render-error"' in page
        assert "Broken visualizer failed: ValueError: cannot draw this" in page

        result_id = _current(client)["result_id"]
        view = client.get(f"/v1/results/{result_id}/view").json()
        assert view["selected"] == "Broken"
        assert view["error"] is not None

        view = client.get(f"/v1/results/{result_id}/view", params={"v": "Table"}).json()
        assert view["error"] is None
        assert view["selected"] == "Table"


def test_no_visualizer_placeholder() -> None:
    config = AppConfig(
        visualizers={"result": VisualizerOptions(enabled=False)},
        session_ttl_seconds=None,
    )
    with TestClient(create_app(config)) as client:
        result_id = client.post("/v1/eval", json={"code": "42"}).json()["result_id"]
        view = client.get(f"/v1/results/{result_id}/view").json()

    assert view["tabs"] == []
    assert view["selected"] is None
    assert view["error"] is None
    assert "No visualizer for a value of type int" in view["html"]


def test_routes_honour_prefix(tmp_path: Path) -> None:
    target = tmp_path / "f.txt"
    target.write_text("hi")
    config = AppConfig(prefix="/repl/")

    with TestClient(create_app(config)) as client:
        assert client.get("/repl/health").status_code == 200
        assert client.get("/health").status_code == 404

        page = client.post("/repl/eval", data={"code": f"__import__('pathlib').Path({str(target)!r})"}).text
        page = client.get(link_href(page, "Download")).text
        url = link_href(page, "Download here")
        assert url.startswith("/repl/file-visualizer/download?id=")
        assert client.get(url).text == "hi"


def test_page_links_go_stale_after_json_navigation(client: TestClient) -> None:
    page = _eval(client, "{'a': {'b': 1}, 'z': 2}")
    nested_link = link_href(page, "b")
    result_id = _current(client)["result_id"]

    client.post(f"/v1/results/{result_id}/descend", json={"key": "z"})
    assert client.get(nested_link).status_code == 404
    assert _current(client)["trail"] == "z;"

    client.post(f"/v1/results/{result_id}/ascend", json={"index": 0})
    page = client.get("/").text
    other_link = link_href(page, "a")
    client.get(link_href(page, "z"))
    assert client.get(other_link).status_code == 404
    assert _current(client)["trail"] == "z;"


def test_download_of_non_ascii_file_name(client: TestClient, tmp_path: Path) -> None:
    target = tmp_path / "отчёт.txt"
    target.write_text("данные", encoding="utf-8")

    page = _eval(client, f"__import__('pathlib').Path({str(target)!r})")
    page = client.get(link_href(page, "Download")).text
    response = client.get(link_href(page, "Download here"))

    assert response.status_code == 200
    assert response.content == target.read_bytes()
    assert response.headers["content-disposition"] == (
        "attachment; filename=\"_____.txt\"; "
        "filename*=UTF-8''%D0%BE%D1%82%D1%87%D1%91%D1%82.txt"
    )


def test_system_exit_is_an_evaluation_result(client: TestClient) -> None:
    response = client.post("/v1/eval", json={"code": "raise SystemExit(3)"})
    assert response.status_code == 200
    assert response.json()["failed"] is True
    assert response.json()["value_type"] == "SystemExit"

    page = _eval(client, "import sys\nsys.exit('bye')")
    assert _current(client)["applicable"][0] == "Throwable"
    assert "SystemExit" in page
