"""Tests of the helpers in tests/helpers.py"""

import pytest

from .helpers import check_good_markdown


@pytest.mark.parametrize("text, ok, msg", [
    ("This is a paragraph", True, ""),
    ("This is a paragraph\n\nThis is also\n", True, ""),
    ("   Bad: initial space", False, "start with whitespace"),
    ("<!-- ok -->\nA paragraph", True, ""),
    ("<!-- bad -->A paragraph", False, "comment with following text"),
    ("Trailing comment<!-- bad -->\n", False, "comment in the middle"),
    ("Look here: [None](https://foo.com).", False, "link to None"),
    ("Look here: [foo](https://foo.com/api/id/None).", False, "link to a None"),
    ("* [ ] [#](https://www.pivotaltracker.com/story/show/) Hmm", False, "no number"),
    ("* [ ] [#123](https://www.pivotaltracker.com/story/show/123) Fine", True, ""),
])
def test_check_good_markdown(text, ok, msg):
    if ok:
        assert msg == ""
        check_good_markdown(text)
    else:
        with pytest.raises(ValueError, match=msg):
            check_good_markdown(text)
