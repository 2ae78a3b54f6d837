import unittest
from unittest.mock import patch

from src.models import Post, User
from src.posts import SLUG_RETRY_ATTEMPTS, make_unique_slug, render_markdown, slugify_title
from src.posts import _slug_taken as real_slug_taken
from tests.base import ApiTestCase


class SlugifyTests(unittest.TestCase):
    def test_lowercases_and_hyphenates(self):
        self.assertEqual(slugify_title("Hello World"), "hello-world")

    def test_ascii_normalizes(self):
        self.assertEqual(slugify_title("Café Déjà Vu"), "cafe-deja-vu")

    def test_collapses_punctuation(self):
        self.assertEqual(slugify_title("  Hello,   World!!  "), "hello-world")

    def test_empty_title_falls_back(self):
        self.assertEqual(slugify_title("!!!"), "post")
        self.assertEqual(slugify_title(""), "post")


class RenderMarkdownTests(unittest.TestCase):
    def test_renders_heading(self):
        self.assertIn("<h1>hi</h1>", render_markdown("# hi"))

    def test_renders_inline_formatting_links_and_images(self):
        html = render_markdown("**bold** [link](https://example.com) ![alt](https://example.com/a.png)")
        self.assertIn("<strong>bold</strong>", html)
        self.assertIn('<a href="https://example.com">link</a>', html)
        self.assertIn("<img", html)
        self.assertIn('src="https://example.com/a.png"', html)
        self.assertIn('alt="alt"', html)

    def test_strips_script_tags(self):
        html = render_markdown("hello <script>alert('x')</script>")
        self.assertNotIn("<script", html)

    def test_strips_event_handlers(self):
        html = render_markdown('<img src="https://example.com/a.png" onerror="alert(1)">')
        self.assertNotIn("onerror", html)

    def test_drops_javascript_urls(self):
        html = render_markdown("[click](javascript:void)")
        self.assertNotIn("javascript:", html)
        self.assertIn("click", html)

    def test_strips_link_target(self):
        html = render_markdown('<a href="https://example.com" target="_blank">out</a>')
        self.assertNotIn("target", html)
        self.assertIn('href="https://example.com"', html)

    def test_strips_iframes(self):
        html = render_markdown('<iframe src="https://evil.example"></iframe>')
        self.assertNotIn("<iframe", html)


class UniqueSlugTests(ApiTestCase):
    def _add_post(self, slug, author):
        post = Post(author_id=author.id, title=slug, slug=slug, content="")
        self.db.add(post)
        self.db.commit()
        return post

    def _add_user(self):
        user = User(username="writer", email="w@x.com", password_hash="x")
        self.db.add(user)
        self.db.commit()
        return user

    def test_free_slug_is_used_as_is(self):
        self.assertEqual(make_unique_slug(self.db, "Hello World"), "hello-world")

    def test_suffix_search_is_sequential(self):
        user = self._add_user()
        self._add_post("hello-world", user)
        self.assertEqual(make_unique_slug(self.db, "Hello World"), "hello-world-1")
        self._add_post("hello-world-1", user)
        self.assertEqual(make_unique_slug(self.db, "Hello World"), "hello-world-2")

    def test_gap_in_suffixes_is_filled_first(self):
        user = self._add_user()
        self._add_post("hello-world", user)
        self._add_post("hello-world-2", user)
        self.assertEqual(make_unique_slug(self.db, "Hello World"), "hello-world-1")

    def test_excluded_post_does_not_collide_with_itself(self):
        user = self._add_user()
        post = self._add_post("hello-world", user)
        self.assertEqual(make_unique_slug(self.db, "Hello, World!", exclude_post_id=post.id), "hello-world")


class SlugCommitRetryTests(ApiTestCase):
    """A slug that looked free but is taken at commit time is searched again."""

    def setUp(self):
        super().setUp()
        self.token = self.register_and_login()

    def _free_once(self):
        calls = []

        def slug_taken(db, slug, exclude_post_id):
            calls.append(slug)
            if len(calls) == 1:
                return False
            return real_slug_taken(db, slug, exclude_post_id)

        return slug_taken

    def test_create_retries_after_unique_violation(self):
        self.assertEqual(self.create_post(self.token).json()["slug"], "hello-world")

        with patch("src.posts._slug_taken", side_effect=self._free_once()):
            response = self.create_post(self.token)

        self.assertEqual(response.status_code, 201, response.text)
        self.assertEqual(response.json()["slug"], "hello-world-1")
        self.assertEqual(self.db.query(Post).count(), 2)

    def test_rename_retries_after_unique_violation(self):
        self.create_post(self.token, title="Taken")
        post = self.create_post(self.token, title="Other", content="old").json()

        with patch("src.posts._slug_taken", side_effect=self._free_once()):
            response = self.client.put(
                f"/api/posts/{post['id']}",
                json={"title": "Taken", "content": "new"},
                headers=self.auth(self.token),
            )

        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["slug"], "taken-1")
        self.assertEqual(body["title"], "Taken")
        self.assertEqual(body["content"], "new")

    def test_gives_up_with_conflict_after_repeated_violations(self):
        self.create_post(self.token)

        with patch("src.posts._slug_taken", return_value=False) as slug_taken:
            response = self.create_post(self.token)

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json(), {"error": "slug_conflict"})
        self.assertEqual(slug_taken.call_count, SLUG_RETRY_ATTEMPTS)
        self.assertEqual(self.db.query(Post).count(), 1)


if __name__ == "__main__":
    unittest.main()
