import json

from springanim.core.physics import sample


class TestSample:
    def test_default_preset(self, client):
        response = client.post("/springs/sample", json={"x": 100})
        data = response.json()

        assert response.status_code == 200
        assert data["count"] == 106
        assert data["preset"] == "default"
        assert data["params"] == {"stiffness": 1.0, "damping": 0.1, "mass": 1.0}
        assert data["samples"] == sample(100, 0, 1, 1, 0.1)

    def test_explicit_parameters(self, client):
        response = client.post("/springs/sample", json={"x": 10, "stiffness": 1, "damping": 0.1})
        data = response.json()

        assert data["count"] == 70
        assert data["preset"] is None

    def test_resting_start(self, client):
        data = client.post("/springs/sample", json={"x": 0, "velocity": 0}).json()
        assert data == {"samples": [], "count": 0, "params": data["params"], "preset": "default"}

    def test_unstable_spring(self, client):
        response = client.post("/springs/sample", json={"x": 1, "stiffness": 170, "damping": 26})

        assert response.status_code == 400
        assert "diverged" in response.json()["detail"]

    def test_step_cap(self, client):
        response = client.post("/springs/sample", json={"x": 100, "max_steps": 5})

        assert response.status_code == 400
        assert "within 5 steps" in response.json()["detail"]

    def test_unknown_preset(self, client):
        response = client.post("/springs/sample", json={"x": 1, "preset": "nope"})

        assert response.status_code == 404
        assert response.json()["message"] == "Preset 'nope' not found"

    def test_validation(self, client):
        assert client.post("/springs/sample", json={"x": 1, "mass": 0}).status_code == 422
        assert client.post("/springs/sample", json={"x": 1, "stiffness": -1, "damping": 0}).status_code == 422


class TestAnimation:
    def test_animation(self, client):
        response = client.post("/springs/animation", json={
            "x": 10,
            "stiffness": 1,
            "damping": 0.1,
            "name": "slide-in",
            "mapper": {"kind": "translate", "options": {"axis": "Y"}}
        })
        data = response.json()

        assert response.status_code == 200
        assert data["name"] == data["class_name"] == "slide-in"
        assert data["frame_count"] == 70
        assert data["remove_after_ms"] == data["duration_ms"] + 1
        assert data["css"].startswith("@keyframes slide-in {0%{transform:translateY(9.9px);}")
        assert ".slide-in{animation-duration:" in data["css"]
        assert len(data["keyframes"]) == 70

    def test_prefixes(self, client):
        data = client.post("/springs/animation", json={
            "x": 10,
            "preset": "stiff",
            "prefixes": ["-moz-", ""]
        }).json()

        css = data["css"]
        assert css.index("@-moz-keyframes") < css.index("@keyframes")
        assert "-moz-animation-fill-mode:both;animation-fill-mode:both;" in css

    def test_generated_name_is_logged(self, client):
        plan = client.post("/springs/animation", json={"x": 50, "preset": "gentle"}).json()
        record = client.get(f"/animations/{plan['name']}").json()

        assert record["css"] == plan["css"]
        assert record["preset_name"] == "gentle"
        assert record["created_at"].endswith("Z")

    def test_name_conflict(self, client):
        body = {"x": 10, "name": "dupe"}
        assert client.post("/springs/animation", json=body).status_code == 200
        assert client.post("/springs/animation", json=body).status_code == 409

    def test_nothing_to_animate(self, client):
        response = client.post("/springs/animation", json={"x": 0})

        assert response.status_code == 400
        assert "already at rest" in response.json()["detail"]

    def test_unknown_mapper(self, client):
        response = client.post("/springs/animation", json={"x": 10, "mapper": {"kind": "skew"}})
        assert response.status_code == 400

    def test_bad_name(self, client):
        assert client.post("/springs/animation", json={"x": 10, "name": "a b"}).status_code == 422

    def test_unknown_animation(self, client):
        response = client.get("/animations/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "resource_not_found"


class TestLive:
    def test_stream_matches_samples(self, client):
        response = client.post("/springs/live", json={"x": 10, "stiffness": 1, "damping": 0.1, "fps": 1000})
        lines = [json.loads(line) for line in response.text.splitlines() if line]

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")
        assert [line["x"] for line in lines[:-1]] == sample(10, 0, 1, 1, 0.1)
        assert lines[-1] == {"frame": 70, "resting": True}

    def test_resting_start(self, client):
        response = client.post("/springs/live", json={"x": 0, "fps": 1000})
        assert [json.loads(line) for line in response.text.splitlines()] == [{"frame": 0, "resting": True}]

    def test_unstable_rejected_before_streaming(self, client):
        response = client.post("/springs/live", json={"x": 1, "stiffness": 170, "damping": 26})
        assert response.status_code == 400

    def test_unstable_near_rest_rejected(self, client):
        response = client.post("/springs/live", json={"x": 0.1, "stiffness": 170, "damping": 26})

        assert response.status_code == 400
        assert "diverged" in response.json()["detail"]


class TestPresets:
    def test_list(self, client):
        presets = client.get("/presets").json()["presets"]
        assert presets[0]["preset_name"] == "default"
        assert len(presets) == 5

    def test_get_with_preview(self, client):
        data = client.get("/presets/wobbly", params={"include_preview": True, "preview_points": 10}).json()

        assert data["stiffness"] == 0.5
        assert 2 <= len(data["preview"]) <= 10

    def test_get_without_preview(self, client):
        assert client.get("/presets/stiff").json()["preview"] is None

    def test_missing(self, client):
        assert client.get("/presets/nope").status_code == 404

    def test_put(self, client):
        response = client.put("/presets/snappy", json={"stiffness": 0.8, "damping": 0.12, "description": "Snappy"})

        assert response.status_code == 200
        assert response.json()["description"] == "Snappy"
        assert client.post("/springs/sample", json={"x": 100, "preset": "snappy"}).json()["count"] > 0

    def test_unstable_preview(self, client):
        client.put("/presets/broken", json={"stiffness": 170, "damping": 26})
        response = client.get("/presets/broken", params={"include_preview": True})

        assert response.status_code == 400


class TestSystem:
    def test_health(self, client):
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["database"]["presets"] == 5

    def test_stats(self, client):
        assert client.get("/stats").json()["database"]["presets"] == 5

    def test_api_root(self, client):
        assert client.get("/api").json()["endpoints"]["live"] == "/springs/live"

    def test_unknown_route(self, client):
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
