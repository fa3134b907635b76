"""Unit tests for the threaded comment tree."""

from tests.unit.conftest import NOW
from yume.models import ForumComment, ForumPost, PostCategory
from yume.services import comment_tree


def _comment(comment_id: int, *replies: ForumComment, text: str = "") -> ForumComment:
    return ForumComment(
        id=comment_id,
        author_id=1,
        author_username="Admin",
        text=text or f"comment {comment_id}",
        created_at=NOW,
        replies=list(replies),
    )


def _forest() -> list[ForumComment]:
    # 1 -> (2 -> 3), 4
    return [_comment(1, _comment(2, _comment(3))), _comment(4)]


class TestTraversal:
    """Test walking and lookup."""

    def test_walk_is_depth_first(self):
        assert [c.id for c in comment_tree.walk_comments(_forest())] == [1, 2, 3, 4]

    def test_find_nested(self):
        assert comment_tree.find_comment(_forest(), 3).text == "comment 3"
        assert comment_tree.find_comment(_forest(), 99) is None

    def test_next_comment_id_spans_posts(self):
        posts = [
            ForumPost(
                id=post_id,
                title="t",
                content="c",
                author_id=1,
                author_username="Admin",
                category=PostCategory.GENERAL,
                created_at=NOW,
                comments=comments,
            )
            for post_id, comments in ((1, _forest()), (2, [_comment(9)]))
        ]
        assert comment_tree.next_comment_id(posts) == 10
        assert comment_tree.next_comment_id([]) == 1


class TestTransform:
    """Test single-node mutation."""

    def test_edit_nested_node(self):
        forest = _forest()
        updated, found = comment_tree.transform_comment(forest, 3, comment_tree.edit_text("edited"))
        assert found
        assert comment_tree.find_comment(updated, 3).text == "edited"
        # Original snapshot unchanged
        assert comment_tree.find_comment(forest, 3).text == "comment 3"

    def test_untouched_siblings_are_shared(self):
        forest = _forest()
        updated, _ = comment_tree.transform_comment(forest, 3, comment_tree.edit_text("edited"))
        assert updated[1] is forest[1]
        assert updated[0] is not forest[0]

    def test_delete_removes_subtree(self):
        updated, found = comment_tree.transform_comment(_forest(), 2, comment_tree.delete())
        assert found
        assert [c.id for c in comment_tree.walk_comments(updated)] == [1, 4]

    def test_delete_keeps_sibling_order(self):
        forest = [_comment(1), _comment(2), _comment(3)]
        updated, _ = comment_tree.transform_comment(forest, 2, comment_tree.delete())
        assert [c.id for c in updated] == [1, 3]

    def test_missing_id_returns_same_list(self):
        forest = _forest()
        updated, found = comment_tree.transform_comment(forest, 42, comment_tree.delete())
        assert not found
        assert updated is forest

    def test_insert_reply_prepends(self):
        updated, _ = comment_tree.transform_comment(
            _forest(), 2, comment_tree.insert_reply(_comment(5))
        )
        parent = comment_tree.find_comment(updated, 2)
        assert [r.id for r in parent.replies] == [5, 3]

    def test_vote_toggles_and_recounts(self):
        forest = [_comment(1)]
        liked, _ = comment_tree.transform_comment(forest, 1, comment_tree.vote(7, like=True))
        assert liked[0].liked_by == [7] and liked[0].likes == 1

        disliked, _ = comment_tree.transform_comment(liked, 1, comment_tree.vote(7, like=False))
        assert disliked[0].liked_by == [] and disliked[0].likes == 0
        assert disliked[0].disliked_by == [7] and disliked[0].dislikes == 1

        cleared, _ = comment_tree.transform_comment(disliked, 1, comment_tree.vote(7, like=False))
        assert cleared[0].disliked_by == [] and cleared[0].dislikes == 0
