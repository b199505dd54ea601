import os

from alembic.script import ScriptDirectory

SCRIPT_LOCATION = os.path.join(os.path.dirname(__file__), os.pardir, "alembic")

# alembic_version.version_num is VARCHAR(32)
MAX_REVISION_LENGTH = 32


def test_revision_ids_fit_version_table():
    revisions = list(ScriptDirectory(SCRIPT_LOCATION).walk_revisions())
    assert revisions
    for script in revisions:
        assert len(script.revision) <= MAX_REVISION_LENGTH, script.revision


def test_single_head():
    assert len(ScriptDirectory(SCRIPT_LOCATION).get_heads()) == 1
