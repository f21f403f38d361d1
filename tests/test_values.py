"""Tests for Values snapshots and field accessors."""

import copy
import pickle
from dataclasses import dataclass

import numpy as np
import pytest

from tweenline.values import Field, FieldSet, Values


@dataclass
class Style:
    x: float = 0.0
    y: float = 0.0
    opacity: float = 1.0


class Sprite:
    def __init__(self):
        self.position = [0.0, 0.0]


class TestValues:
    def test_access_by_key_and_attribute(self):
        values = Values(x=1.0, y=2.0)
        assert values["x"] == 1.0
        assert values.y == 2.0
        assert len(values) == 2
        assert list(values) == ["x", "y"]

    def test_missing_attribute(self):
        with pytest.raises(AttributeError):
            Values(x=1.0).z

    def test_is_immutable(self):
        values = Values(x=1.0)
        with pytest.raises(AttributeError):
            values.x = 2.0
        with pytest.raises(TypeError):
            values["x"] = 2.0

    def test_equals_plain_mapping(self):
        assert Values(x=1.0) == {"x": 1.0}
        assert Values({"x": 1.0}) == Values(x=1.0)
        assert Values(x=1.0) != Values(x=2.0)
        assert Values(x=1.0) != {"x": 1.0, "y": 2.0}

    def test_equality_with_array_fields(self):
        a = Values(pos=np.array([1.0, 2.0]), alpha=0.5)
        assert a == Values(pos=np.array([1.0, 2.0]), alpha=0.5)
        assert a != Values(pos=np.array([1.0, 3.0]), alpha=0.5)
        assert a != Values(pos=np.array([1.0, 2.0, 0.0]), alpha=0.5)
        assert a == {"pos": np.array([1.0, 2.0]), "alpha": 0.5}

    def test_copy_and_pickle(self):
        values = Values(x=1.0, pos=np.array([1.0, 2.0]))
        assert copy.copy(values) == values
        assert copy.deepcopy(values) == values
        restored = pickle.loads(pickle.dumps(values))
        assert isinstance(restored, Values)
        assert restored == values

    def test_merged_and_replace(self):
        values = Values(x=1.0, y=2.0)
        assert values.merged({"y": 5.0, "z": 3.0}) == {"x": 1.0, "y": 5.0, "z": 3.0}
        assert values.replace(x=0.0) == {"x": 0.0, "y": 2.0}
        assert values == {"x": 1.0, "y": 2.0}

    def test_only(self):
        values = Values(x=1.0, y=2.0)
        assert values.only(["y", "missing"]) == {"y": 2.0}

    def test_repr(self):
        assert repr(Values(x=1.5)) == "Values(x=1.5)"


class TestFieldSet:
    def test_attributes_capture_and_apply(self):
        fields = FieldSet.attributes("x", "opacity")
        style = Style(x=3.0, opacity=0.5)

        assert fields.capture(style) == {"x": 3.0, "opacity": 0.5}

        fields.apply(style, Values(x=7.0))
        assert style.x == 7.0
        assert style.opacity == 0.5

    def test_from_dataclass(self):
        assert FieldSet.from_dataclass(Style).names == ("x", "y", "opacity")
        assert FieldSet.from_dataclass(Style, "y").names == ("y",)

    def test_from_dataclass_rejects_unknown_names(self):
        with pytest.raises(ValueError):
            FieldSet.from_dataclass(Style, "z")
        with pytest.raises(TypeError):
            FieldSet.from_dataclass(Sprite)

    def test_custom_accessors(self):
        def set_px(sprite, value):
            sprite.position[0] = value

        fields = FieldSet([Field("px", lambda s: s.position[0], set_px)])
        sprite = Sprite()
        fields.apply(sprite, {"px": 4.0})
        assert sprite.position == [4.0, 0.0]
        assert fields.capture(sprite) == {"px": 4.0}

    def test_apply_unknown_field_raises(self):
        fields = FieldSet.attributes("x")
        with pytest.raises(KeyError):
            fields.apply(Style(), {"opacity": 0.0})

    def test_duplicate_field_raises(self):
        with pytest.raises(ValueError):
            FieldSet.attributes("x", "x")

    def test_container_protocol(self):
        fields = FieldSet.attributes("x", "y")
        assert "x" in fields
        assert "z" not in fields
        assert len(fields) == 2
        assert [f.name for f in fields] == ["x", "y"]
        assert fields["y"].name == "y"
