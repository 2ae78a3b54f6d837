import unittest

from fastapi.testclient import TestClient

from src.database import SessionLocal, engine
from src.main import app
from src.models import Base
from src.storage import InMemoryStorageClient, get_storage_client

STRONG_PASSWORD = "Str0ng!Pass"


class ApiTestCase(unittest.TestCase):
    """Fresh schema, a TestClient and in-memory storage for every test."""

    def setUp(self):
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)

        self.storage = InMemoryStorageClient()
        app.dependency_overrides[get_storage_client] = lambda: self.storage
        self.addCleanup(app.dependency_overrides.clear)

        self.client = TestClient(app)
        self.db = SessionLocal()
        self.addCleanup(self.db.close)

    def signup(self, username="alice", email="a@x.com", password=STRONG_PASSWORD, **extra):
        payload = {"username": username, "email": email, "password": password}
        payload.update(extra)
        return self.client.post("/api/auth/signup", json=payload)

    def login(self, identifier="alice", password=STRONG_PASSWORD):
        return self.client.post("/api/auth/login", json={"identifier": identifier, "password": password})

    def register_and_login(self, username="alice", email="a@x.com"):
        response = self.signup(username=username, email=email)
        self.assertEqual(response.status_code, 201, response.text)
        response = self.login(identifier=username)
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["token"]

    @staticmethod
    def auth(token):
        return {"Authorization": f"Bearer {token}"}

    def create_post(self, token, title="Hello World", content="# hi", published=True, **extra):
        payload = {"title": title, "content": content, "published": published}
        payload.update(extra)
        return self.client.post("/api/posts", json=payload, headers=self.auth(token))
