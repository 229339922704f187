"""
HTTP and WebSocket tests for the posture service router.
"""

import json

from fastapi.testclient import TestClient

from main import app
from _poses import as_payload, build_hinge_pose, build_plank_pose, build_standing_pose

client = TestClient(app)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["modes"] == ["hip_hinge", "plank", "bird_dog", "dead_bug", "walking_posture"]


class TestExercises:

    def test_list(self):
        r = client.get("/api/posture/exercises")
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["count"] == 5
        assert len(data["divergences"]) == 2

    def test_filter_by_category(self):
        data = client.get("/api/posture/exercises", params={"category": "posture"}).json()["data"]
        assert [e["name"] for e in data["exercises"]] == ["Walking"]

    def test_invalid_category(self):
        r = client.get("/api/posture/exercises", params={"category": "yoga"})
        assert r.status_code == 400


class TestScore:

    def test_good_hinge(self):
        r = client.post("/api/posture/score", json={
            "mode": "Hip Hinge",
            "keypoints": as_payload(build_hinge_pose()),
        })
        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        assert body["data"]["score"] == 100
        assert body["data"]["cues"] == []

    def test_plank_cues(self):
        data = client.post("/api/posture/score", json={
            "mode": "plank",
            "keypoints": as_payload(build_plank_pose()),
        }).json()["data"]
        assert data["score"] == 65
        assert len(data["headline_cues"]) == 2

    def test_unknown_mode(self):
        data = client.post("/api/posture/score", json={
            "mode": "Burpee",
            "keypoints": as_payload(build_hinge_pose()),
        }).json()["data"]
        assert data["score"] == 0
        assert data["cues"] == ["Unsupported mode"]

    def test_no_pose(self):
        data = client.post("/api/posture/score", json={"mode": "Plank", "keypoints": None}).json()["data"]
        assert data["scored"] is False
        assert data["cues"] == ["Position your full body in frame"]

    def test_full_body_too_close(self):
        data = client.post("/api/posture/score", json={
            "mode": "Hip Hinge",
            "keypoints": as_payload(build_hinge_pose()),
            "full_body": True,
        }).json()["data"]
        assert data["status"] == "Move further back! Full body should be visible."

    def test_confidence_out_of_range_is_rejected(self):
        keypoints = as_payload(build_hinge_pose())
        keypoints[0]["score"] = 1.5
        r = client.post("/api/posture/score", json={"mode": "Plank", "keypoints": keypoints})
        assert r.status_code == 422

    def test_non_finite_coordinates_are_rejected(self):
        for bad in (float("nan"), float("inf")):
            keypoints = as_payload(build_hinge_pose(knee=100.0))
            keypoints[4]["x"] = bad
            r = client.post(
                "/api/posture/score",
                content=json.dumps({"mode": "Hip Hinge", "keypoints": keypoints}),
                headers={"Content-Type": "application/json"},
            )
            assert r.status_code == 422


def test_visibility_endpoint():
    keypoints = [k for k in as_payload(build_standing_pose()) if k["name"] != "left_knee"]
    data = client.post("/api/posture/visibility", json={
        "keypoints": keypoints,
        "check_distance": True,
    }).json()["data"]
    assert data["all_visible"] is False
    assert data["missing_joints"] == ["left_knee"]
    assert data["too_close"] is False
    assert data["visible_joints"] == [k["name"] for k in keypoints]


def test_visibility_endpoint_hides_low_confidence_joints():
    keypoints = as_payload(build_standing_pose())
    keypoints[0]["score"] = 0.2
    data = client.post("/api/posture/visibility", json={"keypoints": keypoints}).json()["data"]
    assert data["all_visible"] is True
    assert "nose" not in data["visible_joints"]


class TestRecommendations:

    def test_boundary(self):
        data = client.get("/api/posture/recommendations", params={"score": 50}).json()["data"]
        assert data["tier"] == "moderate"
        assert data["frequency"] == "4-5 times per week"

    def test_out_of_range(self):
        assert client.get("/api/posture/recommendations", params={"score": 150}).status_code == 422


class TestScreeningAndPlan:

    def test_screening(self):
        data = client.post("/api/posture/screening", json={"fever": True}).json()["data"]
        assert data["tone"] == "bad"

    def test_invalid_location(self):
        r = client.post("/api/posture/screening", json={"location": "neck"})
        assert r.status_code == 422

    def test_plan(self):
        r = client.post("/api/posture/plan", json={
            "symptoms": {"location": "low", "desk_hours": 9},
            "last_score": 45,
            "cues": ["Push hips back; hinge more.", "Level your hips.", "extra"],
        })
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["plan"]["exercises"][-1]["pose_mode"] == "hip_hinge"
        assert data["screening"]["label"] == "Likely simple mechanical back pain"
        assert data["suggestions"]["video_notes"] == ["Push hips back; hinge more.", "Level your hips."]
        assert "not medical advice" in data["disclaimer"]

    def test_plan_without_symptoms(self):
        data = client.post("/api/posture/plan", json={"last_score": 90}).json()["data"]
        assert data["screening"] is None
        assert len(data["plan"]["stretches"]) == 2


class TestStream:

    def test_stream_scores_frames(self):
        with client.websocket_connect("/api/posture/ws/stream/plank") as ws:
            hello = ws.receive_json()
            assert hello["type"] == "CONNECTED"
            assert hello["supported"] is True

            ws.send_json({"keypoints": as_payload(build_plank_pose())})
            result = ws.receive_json()
            assert result["type"] == "POSE_RESULT"
            assert result["score"] == 65

            ws.send_json({"keypoints": None})
            result = ws.receive_json()
            assert result["scored"] is False

    def test_stream_reports_bad_frames(self):
        with client.websocket_connect("/api/posture/ws/stream/plank") as ws:
            ws.receive_json()
            ws.send_text("not json")
            assert ws.receive_json()["type"] == "ERROR"

            ws.send_text(json.dumps({"keypoints": [{"name": "left_knee", "x": float("nan"), "y": 1.0}]}))
            assert ws.receive_json()["type"] == "ERROR"

            ws.send_bytes(b"\x00\x01")
            assert ws.receive_json()["type"] == "ERROR"

            ws.send_json({"keypoints": as_payload(build_plank_pose())})
            assert ws.receive_json()["type"] == "POSE_RESULT"

    def test_stream_unknown_mode(self):
        with client.websocket_connect("/api/posture/ws/stream/squat") as ws:
            assert ws.receive_json()["supported"] is False
            ws.send_json({"keypoints": as_payload(build_hinge_pose())})
            assert ws.receive_json()["cues"] == ["Unsupported mode"]
