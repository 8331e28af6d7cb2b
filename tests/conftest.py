import os

# Headless test runs: use Qt's offscreen platform unless one is set explicitly.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
