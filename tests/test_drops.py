from liquid.drops import Drop, from_drop


class DropTest:
    def to_liquid(self):
        return "drop"


class RedConvertible(Drop):
    def to_liquid(self):
        return {"color": "red"}


def test_from_drop_calls_to_liquid():
    assert from_drop(DropTest()) == "drop"


def test_from_drop_returns_non_drop_unchanged():
    assert from_drop("not a drop") == "not a drop"


def test_from_drop_subclass_returning_mapping():
    assert from_drop(RedConvertible()) == {"color": "red"}


def test_from_drop_leaves_containers_alone():
    items = [DropTest()]
    assert from_drop(items) is items


def test_duck_typed_object_is_a_drop():
    assert isinstance(DropTest(), Drop)
    assert not isinstance(42, Drop)
    assert from_drop(42) == 42