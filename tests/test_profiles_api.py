import unittest

from src.models import User
from tests.base import ApiTestCase


class ProfileTests(ApiTestCase):
    def test_profile_shows_public_fields_and_published_posts(self):
        token = self.register_and_login()
        user = self.db.query(User).filter(User.username == "alice").one()
        user.bio = "Writes about things"
        self.db.commit()

        self.create_post(token, title="Public one")
        self.create_post(token, title="Secret draft", published=False)
        self.create_post(token, title="Public two")

        response = self.client.get("/api/profiles/alice")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["user"], {
            "username": "alice",
            "display_name": "alice",
            "bio": "Writes about things",
            "avatar_url": None,
        })
        self.assertEqual([p["title"] for p in body["posts"]], ["Public two", "Public one"])

    def test_unknown_profile_is_not_found(self):
        response = self.client.get("/api/profiles/nobody")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "not_found"})


if __name__ == "__main__":
    unittest.main()
