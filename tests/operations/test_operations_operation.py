import unittest

from reviewsync.models import Movie
from reviewsync.operations import Operation, OperationKind


class TestOperation(unittest.TestCase):
    def test_kind_values_match_persisted_types(self) -> None:
        self.assertEqual(OperationKind.CREATE.value, "post")
        self.assertEqual(OperationKind.DELETE.value, "delete")

    def test_to_dict_shape(self) -> None:
        op = Operation.create(Movie(id="m1", title="Alien"))
        data = op.to_dict()
        self.assertEqual(data["type"], "post")
        self.assertEqual(data["movie"]["id"], "m1")
        self.assertEqual(op.entity_id, "m1")

    def test_from_dict(self) -> None:
        op = Operation.from_dict({"type": "delete", "movie": {"id": "m2"}})
        self.assertIs(op.kind, OperationKind.DELETE)
        self.assertEqual(op.entity_id, "m2")

    def test_from_dict_rejects_invalid_entries(self) -> None:
        for raw in (
            None,
            [],
            {"type": "put", "movie": {"id": "m1"}},
            {"type": "post"},
            {"type": "post", "movie": {"title": "no id"}},
        ):
            with self.assertRaises(ValueError, msg=repr(raw)):
                Operation.from_dict(raw)


if __name__ == "__main__":
    unittest.main()
