"""Environment for the test run; must be in place before src is imported."""

import os
import tempfile

os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = ""
os.environ["PATH_DATABASE"] = tempfile.mkdtemp(prefix="markdown-blog-tests-")
os.environ["NAME_DB"] = "test.db"
os.environ["RECAPTCHA_SECRET"] = ""
os.environ["S3_BUCKET"] = ""
