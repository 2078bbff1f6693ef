import time

from edusearch.config import settings

RESOURCE_HIT = {
    "id": "mod-7",
    "score": 0.64,
    "values": [],
    "metadata": {
        "type": "url",
        "coursename": "Biología",
        "sectionname": "Tema 2",
        "modulename": "La célula",
        "moduleprofile": "Lectura introductoria",
        "moduleurl": "https://lms.test/mod/url/view.php?id=7",
        "sectionurl": "https://lms.test/course/section.php?id=2",
        "id_subject": 12,
    },
}


class TestSessionLifecycle:
    def _create(self, client):
        r = client.post("/api/v1/sessions")
        assert r.status_code == 201
        return r.json()["session_id"]

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

    def test_new_session_is_waiting(self, client):
        r = client.post("/api/v1/sessions")
        assert r.status_code == 201
        data = r.json()
        assert data["phase"] == "idle"
        assert data["query_text"] == ""
        assert data["content_type"] == settings.default_content_type
        assert data["is_searching"] is False
        assert data["has_searched"] is False
        assert data["status_message"] == "Esperando resultados..."
        assert data["results"] == []

    def test_get_session(self, client):
        session_id = self._create(client)
        r = client.get(f"/api/v1/sessions/{session_id}")
        assert r.status_code == 200
        assert r.json()["session_id"] == session_id

    def test_unknown_session_404(self, client):
        assert client.get("/api/v1/sessions/nope").status_code == 404
        assert client.post("/api/v1/sessions/nope/reset").status_code == 404
        assert client.delete("/api/v1/sessions/nope").status_code == 404

    def test_delete_session(self, client):
        session_id = self._create(client)
        r = client.delete(f"/api/v1/sessions/{session_id}")
        assert r.status_code == 204
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404

    def test_idle_sessions_expire(self, client, fresh_registry):
        session_id = self._create(client)
        session = fresh_registry.get(session_id)
        session.last_seen = time.time() - settings.session_idle_seconds - 1
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404


class TestSessionSearch:
    def _create(self, client):
        return client.post("/api/v1/sessions").json()["session_id"]

    def test_submit_renders_cards(self, client, webhook):
        webhook.body = {"matches": [RESOURCE_HIT]}
        session_id = self._create(client)

        r = client.post(f"/api/v1/sessions/{session_id}/submit", json={
            "text": "célula",
            "content_type": "resource",
        })
        assert r.status_code == 200
        data = r.json()
        assert data["phase"] == "results"
        assert data["has_searched"] is True
        assert data["is_searching"] is False
        assert data["result_count"] == 1
        assert data["status_message"] == "Resultados de búsqueda (1 encontrados):"
        card = data["results"][0]
        assert card["id"] == "mod-7"
        assert card["title"] == "La célula"
        assert card["link_url"] == "https://lms.test/mod/url/view.php?id=7"
        assert card["relevance_percent"] == 64
        assert card["relevance_band"] == "high"
        assert card["relevance_color"] == "green"
        assert card["tags"] == [
            {"label": "Curso: Biología", "emphasis": False},
            {"label": "Sección: Tema 2", "emphasis": False},
            {"label": "Recurso", "emphasis": True},
        ]
        assert webhook.requests == [{"textoBusqueda": "célula", "tipoDeBusqueda": "url"}]

    def test_submit_uses_session_text_and_type(self, client, webhook):
        session_id = self._create(client)
        client.put(f"/api/v1/sessions/{session_id}/query", json={"text": "derivadas"})
        client.put(f"/api/v1/sessions/{session_id}/content-type", json={"content_type": "question"})

        r = client.post(f"/api/v1/sessions/{session_id}/submit", json={})
        assert r.status_code == 200
        assert r.json()["phase"] == "results"
        assert webhook.requests == [{"textoBusqueda": "derivadas", "tipoDeBusqueda": "question"}]

    def test_blank_submit_is_ignored(self, client, webhook):
        session_id = self._create(client)
        r = client.post(f"/api/v1/sessions/{session_id}/submit", json={"text": "   "})
        assert r.status_code == 200
        assert r.json()["phase"] == "idle"
        assert r.json()["has_searched"] is False
        assert webhook.requests == []

    def test_enter_key_submits(self, client, webhook):
        webhook.body = [{"matches": [RESOURCE_HIT]}]
        session_id = self._create(client)
        client.put(f"/api/v1/sessions/{session_id}/query", json={"text": "célula"})

        r = client.post(f"/api/v1/sessions/{session_id}/keys", json={"key": "Enter"})
        assert r.status_code == 200
        assert r.json()["result_count"] == 1

    def test_upstream_failure_looks_like_no_matches(self, client, webhook):
        webhook.status_code = 500
        session_id = self._create(client)

        r = client.post(f"/api/v1/sessions/{session_id}/submit", json={"text": "célula"})
        assert r.status_code == 200
        data = r.json()
        assert data["phase"] == "results"
        assert data["has_searched"] is True
        assert data["results"] == []
        assert data["status_message"] == "Resultados de búsqueda (0 encontrados):"

    def test_malformed_type_looks_like_no_matches(self, client, webhook):
        webhook.body = {"matches": [{"id": "a", "score": 0.5, "metadata": {"type": {"k": 1}}}]}
        session_id = self._create(client)

        r = client.post(f"/api/v1/sessions/{session_id}/submit", json={"text": "célula"})
        assert r.status_code == 200
        data = r.json()
        assert data["phase"] == "results"
        assert data["results"] == []

    def test_odd_subject_id_still_renders(self, client, webhook):
        odd = {**RESOURCE_HIT, "id": "mod-8", "metadata": {**RESOURCE_HIT["metadata"], "id_subject": "MAT-101"}}
        webhook.body = {"matches": [RESOURCE_HIT, odd]}
        session_id = self._create(client)

        r = client.post(f"/api/v1/sessions/{session_id}/submit", json={"text": "célula"})
        assert r.status_code == 200
        assert [c["id"] for c in r.json()["results"]] == ["mod-7", "mod-8"]

    def test_reset_returns_to_waiting(self, client, webhook):
        webhook.body = {"matches": [RESOURCE_HIT]}
        session_id = self._create(client)
        client.post(f"/api/v1/sessions/{session_id}/submit", json={
            "text": "célula",
            "content_type": "quiz",
        })

        r = client.post(f"/api/v1/sessions/{session_id}/reset")
        assert r.status_code == 200
        data = r.json()
        assert data["phase"] == "idle"
        assert data["query_text"] == ""
        assert data["content_type"] == settings.default_content_type
        assert data["has_searched"] is False
        assert data["results"] == []

    def test_content_type_frozen_after_search(self, client, webhook):
        session_id = self._create(client)
        client.post(f"/api/v1/sessions/{session_id}/submit", json={
            "text": "célula",
            "content_type": "quiz",
        })
        r = client.put(f"/api/v1/sessions/{session_id}/content-type", json={"content_type": "question"})
        assert r.status_code == 200
        assert r.json()["content_type"] == "quiz"

    def test_invalid_content_type_rejected(self, client):
        session_id = self._create(client)
        r = client.put(f"/api/v1/sessions/{session_id}/content-type", json={"content_type": "video"})
        assert r.status_code == 422
        r = client.post(f"/api/v1/sessions/{session_id}/submit", json={"text": "x", "content_type": "url"})
        assert r.status_code == 422
