"""クロスレベルリデューサーと merge_configuration のテスト。"""

from pathlib import Path

import pytest

from propstack.environment import Environment, apply_merged_property_sources
from propstack.errors import ConsistencyError, DefaultResourceNotFoundError
from propstack.merge._reducer import (
    merge_configuration,
    merge_locations,
    merge_properties,
)
from propstack.models.config import PropstackConfig
from propstack.models.declaration import (
    Declaration,
    MergedPropertySources,
    PropertySourceAttributes,
)
from propstack.resolution import compose, property_source
from tests.unit.conftest import InMemoryLoader, make_unit

Child = make_unit("Child", module="pkg.child")
Parent = make_unit("Parent", module="pkg.parent")
Root = make_unit("Root", module="lib.root")


def attributes(
    unit: type,
    index: int,
    *,
    locations: tuple[str, ...] = (),
    properties: tuple[str, ...] = (),
    inherit_locations: bool = True,
    inherit_properties: bool = True,
) -> PropertySourceAttributes:
    return PropertySourceAttributes(
        declaring_unit=unit,
        aggregate_index=index,
        locations=locations,
        properties=properties,
        inherit_locations=inherit_locations,
        inherit_properties=inherit_properties,
    )


def subclass(name: str, module: str, *bases: type) -> type:
    return type(name, bases, {"__module__": module})


# =============================================================================
# merge_locations / merge_properties
# =============================================================================


class TestMergeLocations:
    def test_ancestor_locations_first(self) -> None:
        result = merge_locations(
            [
                attributes(Child, 0, locations=("child.properties",)),
                attributes(Parent, 1, locations=("parent.properties",)),
                attributes(Root, 2, locations=("/root.properties",)),
            ]
        )
        assert result == (
            "classpath:root.properties",
            "classpath:pkg/parent.properties",
            "classpath:pkg/child.properties",
        )

    def test_stops_at_level_without_inheritance(self) -> None:
        """inherit_locations=False のレベルは含まれ、それより祖先は含まれない。"""
        result = merge_locations(
            [
                attributes(Child, 0, locations=("child.properties",)),
                attributes(
                    Parent, 1, locations=("parent.properties",), inherit_locations=False
                ),
                attributes(Root, 2, locations=("root.properties",)),
            ]
        )
        assert result == (
            "classpath:pkg/parent.properties",
            "classpath:pkg/child.properties",
        )

    def test_most_derived_without_inheritance(self) -> None:
        result = merge_locations(
            [
                attributes(Child, 0, locations=("a", "b"), inherit_locations=False),
                attributes(Parent, 1, locations=("parent",)),
            ]
        )
        assert result == ("classpath:pkg/a", "classpath:pkg/b")

    def test_level_order_within_level_kept(self) -> None:
        result = merge_locations([attributes(Child, 0, locations=("a", "b"))])
        assert result == ("classpath:pkg/a", "classpath:pkg/b")

    def test_empty(self) -> None:
        assert merge_locations([]) == ()


class TestMergeProperties:
    def test_ancestor_properties_first(self) -> None:
        result = merge_properties(
            [
                attributes(Child, 0, properties=("key=child",)),
                attributes(Parent, 1, properties=("key=parent", "p=1")),
            ]
        )
        assert result == ("key=parent", "p=1", "key=child")

    def test_stops_at_level_without_inheritance(self) -> None:
        result = merge_properties(
            [
                attributes(Child, 0, properties=("c=1",), inherit_properties=False),
                attributes(Parent, 1, properties=("p=1",)),
            ]
        )
        assert result == ("c=1",)

    def test_independent_of_location_inheritance(self) -> None:
        """inherit_locations=False は properties の走査に影響しない。"""
        result = merge_properties(
            [
                attributes(Child, 0, properties=("c=1",), inherit_locations=False),
                attributes(Parent, 1, properties=("p=1",)),
            ]
        )
        assert result == ("p=1", "c=1")


# =============================================================================
# merge_configuration
# =============================================================================


class TestMergeConfiguration:
    def test_unit_without_declarations(self) -> None:
        assert merge_configuration(Child) == MergedPropertySources.empty()

    def test_inherited_properties_later_wins(self) -> None:
        base = property_source(properties=["key=base", "a=1"])(
            subclass("Base", "pkg.base")
        )
        child = property_source(properties=["key=child"])(
            subclass("Leaf", "pkg.leaf", base)
        )

        merged = merge_configuration(child, loader=InMemoryLoader())

        assert merged.properties == ("key=base", "a=1", "key=child")
        env = Environment()
        apply_merged_property_sources(env, InMemoryLoader(), merged)
        assert env.get_property("key") == "child"
        assert env.get_property("a") == "1"

    def test_inheritance_cut_by_middle_level(self) -> None:
        base = property_source(properties=["a=1"], locations=["base.properties"])(
            subclass("Base", "pkg.base")
        )
        middle = property_source(properties=["b=1"], inherit_properties=False)(
            subclass("Middle", "pkg.middle", base)
        )
        leaf = property_source(properties=["c=1"])(subclass("Leaf", "pkg.leaf", middle))

        merged = merge_configuration(leaf, loader=InMemoryLoader())

        assert merged.properties == ("b=1", "c=1")
        assert merged.locations == ("classpath:pkg/base.properties",)

    def test_undecorated_intermediate_class_skipped(self) -> None:
        base = property_source(properties=["a=1"])(subclass("Base", "pkg.base"))
        middle = subclass("Middle", "pkg.middle", base)
        leaf = property_source(properties=["b=1"])(subclass("Leaf", "pkg.leaf", middle))
        assert merge_configuration(leaf, loader=InMemoryLoader()).properties == (
            "a=1",
            "b=1",
        )

    def test_direct_declaration_beats_composed(self) -> None:
        shared = compose(property_source(properties=["key=meta"]))
        unit = property_source(properties=["key=direct"])(
            shared(subclass("Leaf", "pkg.leaf"))
        )
        merged = merge_configuration(unit, loader=InMemoryLoader())
        assert merged.properties == ("key=meta", "key=direct")

    def test_default_resource_from_search_paths(self, tmp_path: Path) -> None:
        """loader 省略時は config.search_paths でローダーを構築する。"""
        resource = tmp_path / "propstack_fixture_pkg" / "SampleCase.properties"
        resource.parent.mkdir()
        resource.write_text("a=1", encoding="utf-8")
        unit = property_source()(subclass("SampleCase", "propstack_fixture_pkg.cases"))
        config = PropstackConfig(search_paths=(str(tmp_path),))

        merged = merge_configuration(unit, config=config)

        assert merged.locations == (
            "classpath:propstack_fixture_pkg/SampleCase.properties",
        )

    def test_missing_default_resource_raises(self, tmp_path: Path) -> None:
        unit = property_source()(subclass("SampleCase", "propstack_fixture_pkg.cases"))
        config = PropstackConfig(search_paths=(str(tmp_path),))
        with pytest.raises(DefaultResourceNotFoundError):
            merge_configuration(unit, config=config)

    def test_custom_resolver(self) -> None:
        def resolver(unit: type[object]) -> list[Declaration]:
            return [
                Declaration(
                    declaring_unit=Parent, aggregate_index=1, properties=("p=1",)
                ),
                Declaration(
                    declaring_unit=Child, aggregate_index=0, properties=("c=1",)
                ),
            ]

        merged = merge_configuration(Child, resolver=resolver, loader=InMemoryLoader())
        assert merged.properties == ("p=1", "c=1")

    def test_inconsistent_level_raises(self) -> None:
        unit = property_source(properties=["a=1"], inherit_locations=False)(
            property_source(properties=["b=1"])(subclass("Leaf", "pkg.leaf"))
        )
        with pytest.raises(ConsistencyError, match="inherit_locations"):
            merge_configuration(unit, loader=InMemoryLoader())
