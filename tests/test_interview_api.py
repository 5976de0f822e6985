import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep API tests deterministic and fast by default.
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from fastapi.testclient import TestClient  # noqa: E402

from app.ai.factory import get_ai_client  # noqa: E402
from app.main import app  # noqa: E402
from app.storage.db import SqliteStore, get_store  # noqa: E402


class FakeAIClient:
    def __init__(self):
        self.responses: list[str] = []
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise RuntimeError("no scripted response")
        return self.responses.pop(0)


class InterviewApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls._tmp = tempfile.TemporaryDirectory()
        cls.store = SqliteStore(os.path.join(cls._tmp.name, "api.db"))
        cls.ai = FakeAIClient()
        app.dependency_overrides[get_store] = lambda: cls.store
        app.dependency_overrides[get_ai_client] = lambda: cls.ai
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls):
        app.dependency_overrides.clear()
        cls.store.close()
        cls._tmp.cleanup()

    def setUp(self):
        self.ai.responses.clear()
        self.ai.prompts.clear()

    def _onboard(self, user_id: str) -> dict:
        headers = {"X-User-Id": user_id}
        created = self.client.post("/v1/users/me", json={"email": f"{user_id}@example.com"}, headers=headers)
        self.assertEqual(created.status_code, 200)
        profile = self.client.put(
            "/v1/users/me/profile",
            json={"industry": "Cloud Computing", "experience": 5, "bio": "SRE", "skills": ["AWS", "Kubernetes"]},
            headers=headers,
        )
        self.assertEqual(profile.status_code, 200)
        return headers

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_missing_identity_is_401(self):
        self.assertEqual(self.client.post("/v1/interview/quiz").status_code, 401)
        self.assertEqual(self.client.get("/v1/interview/assessments").status_code, 401)
        self.assertEqual(self.client.get("/v1/users/me/onboarding").status_code, 401)
        self.assertEqual(self.ai.prompts, [])

    def test_unknown_user_is_404(self):
        response = self.client.post("/v1/interview/quiz", headers={"X-User-Id": "nobody"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "User not found")

    def test_onboarding_status(self):
        headers = {"X-User-Id": "api_onboarding"}
        self.client.post("/v1/users/me", json={}, headers=headers)
        self.assertEqual(self.client.get("/v1/users/me/onboarding", headers=headers).json(), {"isOnboarded": False})
        self._onboard("api_onboarding")
        self.assertEqual(self.client.get("/v1/users/me/onboarding", headers=headers).json(), {"isOnboarded": True})

    def test_profile_contract(self):
        headers = self._onboard("api_profile")
        body = self.client.put(
            "/v1/users/me/profile",
            json={"industry": " FinTech ", "skills": ["Go"]},
            headers=headers,
        ).json()
        self.assertEqual(body["industry"], "fintech")
        self.assertEqual(body["externalId"], "api_profile")
        self.assertEqual(body["skills"], ["Go"])

    def test_quiz_falls_back_when_model_fails(self):
        headers = self._onboard("api_fallback")
        response = self.client.post("/v1/interview/quiz", headers=headers)
        self.assertEqual(response.status_code, 200)
        questions = response.json()["questions"]
        self.assertEqual(len(questions), 3)
        self.assertIn("cloud computing", questions[0]["question"])
        self.assertEqual(set(questions[0]), {"question", "options", "correctAnswer", "explanation"})

    def test_quiz_and_result_round(self):
        headers = self._onboard("api_round")
        self.ai.responses.append(
            '```json\n{"questions": ['
            '{"question": "What is a pod?", "options": ["A container group", "A node", "A volume", "A service"], '
            '"correctAnswer": "A container group", "explanation": "Pods group containers."},'
            '{"question": "What is S3?", "options": ["Compute", "Object storage", "DNS", "Queue"], '
            '"correctAnswer": "Object storage", "explanation": "S3 stores objects."},'
            '{"question": "What is IaC?", "options": ["Infra as code", "A cache", "A CDN", "A VM"], '
            '"correctAnswer": "Infra as code", "explanation": "Declarative infra."}'
            "]}\n```"
        )
        quiz = self.client.post("/v1/interview/quiz", headers=headers)
        self.assertEqual(quiz.status_code, 200)
        questions = quiz.json()["questions"]
        self.assertEqual([q["question"] for q in questions], ["What is a pod?", "What is S3?", "What is IaC?"])
        self.assertIn("with expertise in AWS, Kubernetes", self.ai.prompts[0])

        self.ai.responses.append("Practice with managed object storage services.")
        result = self.client.post(
            "/v1/interview/results",
            json={"questions": questions, "answers": ["A container group", "DNS"], "score": 33.3},
            headers=headers,
        )
        self.assertEqual(result.status_code, 200)
        body = result.json()
        self.assertEqual(body["improvementTip"], "Practice with managed object storage services.")
        self.assertEqual(body["category"], "Technical")
        self.assertEqual([q["isCorrect"] for q in body["questions"]], [True, False, False])
        self.assertIsNone(body["questions"][2]["userAnswer"])

        history = self.client.get("/v1/interview/assessments", headers=headers)
        self.assertEqual(history.status_code, 200)
        self.assertEqual([item["id"] for item in history.json()], [body["id"]])

    def test_result_rejects_malformed_question(self):
        headers = self._onboard("api_malformed")
        response = self.client.post(
            "/v1/interview/results",
            json={
                "questions": [{"question": "Q", "options": ["A", "B"], "correctAnswer": "A", "explanation": "E"}],
                "answers": ["A"],
                "score": 100,
            },
            headers=headers,
        )
        self.assertEqual(response.status_code, 422)


class UnconfiguredAIApiTests(unittest.TestCase):
    """Routes use the real client factory with no model credentials."""

    @classmethod
    def setUpClass(cls):
        cls._tmp = tempfile.TemporaryDirectory()
        cls.store = SqliteStore(os.path.join(cls._tmp.name, "no_ai.db"))
        app.dependency_overrides[get_store] = lambda: cls.store
        app.dependency_overrides.pop(get_ai_client, None)
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls):
        app.dependency_overrides.clear()
        cls.store.close()
        cls._tmp.cleanup()

    def setUp(self):
        env = patch.dict(os.environ, {"AI_PROVIDER": "gemini", "GEMINI_API_KEY": "", "AI_MODEL": ""})
        env.start()
        self.addCleanup(env.stop)
        get_ai_client.cache_clear()
        self.addCleanup(get_ai_client.cache_clear)

    def _onboard(self, user_id: str) -> dict:
        headers = {"X-User-Id": user_id}
        self.client.post("/v1/users/me", json={}, headers=headers)
        self.client.put("/v1/users/me/profile", json={"industry": "Data Science"}, headers=headers)
        return headers

    def test_quiz_serves_fallback(self):
        response = self.client.post("/v1/interview/quiz", headers=self._onboard("no_ai_quiz"))
        self.assertEqual(response.status_code, 200)
        questions = response.json()["questions"]
        self.assertEqual(len(questions), 3)
        self.assertIn("data science", questions[0]["question"])

    def test_result_is_saved_without_tip(self):
        headers = self._onboard("no_ai_result")
        questions = [
            {"question": "Q1", "options": ["A", "B", "C", "D"], "correctAnswer": "A", "explanation": "E1"},
            {"question": "Q2", "options": ["A", "B", "C", "D"], "correctAnswer": "B", "explanation": "E2"},
        ]
        all_correct = self.client.post(
            "/v1/interview/results",
            json={"questions": questions, "answers": ["A", "B"], "score": 100},
            headers=headers,
        )
        self.assertEqual(all_correct.status_code, 200)
        self.assertIsNone(all_correct.json()["improvementTip"])

        one_wrong = self.client.post(
            "/v1/interview/results",
            json={"questions": questions, "answers": ["A", "C"], "score": 50},
            headers=headers,
        )
        self.assertEqual(one_wrong.status_code, 200)
        self.assertIsNone(one_wrong.json()["improvementTip"])

        history = self.client.get("/v1/interview/assessments", headers=headers).json()
        self.assertEqual(len(history), 2)

    def test_missing_identity_is_still_401(self):
        self.assertEqual(self.client.post("/v1/interview/quiz").status_code, 401)


if __name__ == "__main__":
    unittest.main()
