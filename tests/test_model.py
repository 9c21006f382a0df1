"""
Tests for featmodel Core Model Objects

These tests verify:
    - Feature creation and attribute-backed fields
    - Name uniqueness within a model
    - Generated default names that collide with explicit ones
    - Hidden / hidden-parent queries
    - Constraint ownership
    - Whole-model cloning
"""

import threading

import pytest
from featmodel.attributes import ABSTRACT, HIDDEN, NAME, TAGS
from featmodel.constraints import Constraint, Origin
from featmodel.errors import UnresolvedVariableError, ValidationError
from featmodel.expressions import and_, not_, var
from featmodel.model import Feature, FeatureModel
from featmodel.ordered_set import OrderedSet


class TestFeature:
    """Test Feature objects."""

    def test_named_feature(self):
        model = FeatureModel("M")
        feature = model.add_feature("Engine")
        assert isinstance(feature, Feature)
        assert feature.name == "Engine"
        assert feature.properties.get(NAME) == "Engine"
        assert feature.feature_model is model

    def test_flags_default_false(self):
        feature = FeatureModel("M").add_feature("A")
        assert feature.hidden is False
        assert feature.abstract is False
        assert feature.is_hidden() is False

    def test_flags_stored_as_attributes(self):
        feature = FeatureModel("M").add_feature("A", hidden=True, abstract=True)
        assert feature.properties.get(HIDDEN) is True
        assert feature.properties.get(ABSTRACT) is True

    def test_identifiers_unique(self):
        model = FeatureModel("M")
        a = model.add_feature("A")
        b = model.add_feature("B")
        assert a.identifier != b.identifier
        assert a.identifier > 0

    def test_rename(self):
        model = FeatureModel("M")
        feature = model.add_feature("A")
        feature.name = "Renamed"
        assert model.get_feature("Renamed") is feature
        assert model.get_feature("A") is None

    def test_rename_to_taken_name_rejected(self):
        model = FeatureModel("M")
        model.add_feature("A")
        b = model.add_feature("B")

        with pytest.raises(ValidationError):
            b.name = "A"

        assert b.name == "B"

    def test_duplicate_name_rejected_on_add(self):
        model = FeatureModel("M")
        model.add_feature("A")
        with pytest.raises(ValidationError):
            model.add_feature("A")
        assert len(model.features) == 1

    def test_description(self):
        feature = FeatureModel("M").add_feature("A")
        assert feature.description is None
        feature.description = "The A feature"
        assert feature.description == "The A feature"

    def test_generated_name_skips_explicit_name(self):
        """An unnamed feature never reuses a name another feature took explicitly."""
        model = FeatureModel("M")
        first = model.add_feature("First")
        claimed = f"@{first.identifier + 2}"
        explicit = model.add_feature(claimed)
        unnamed = model.add_feature()

        assert unnamed.identifier == first.identifier + 2
        assert unnamed.name == f"{claimed}_2"
        names = [feature.name for feature in model.features]
        assert len(names) == len(set(names))
        assert model.get_feature(claimed) is explicit
        assert model.get_feature(unnamed.name) is unnamed

    def test_generated_name_suffix_keeps_counting(self):
        model = FeatureModel("M")
        first = model.add_feature("First")
        claimed = f"@{first.identifier + 3}"
        model.add_feature(claimed)
        model.add_feature(f"{claimed}_2")
        unnamed = model.add_feature()
        assert unnamed.name == f"{claimed}_3"

    def test_explicit_name_matching_generated_name_rejected(self):
        model = FeatureModel("M")
        unnamed = model.add_feature()
        with pytest.raises(ValidationError):
            model.add_feature(unnamed.name)
        assert model.features == [unnamed]

    def test_rename_through_properties_checked(self):
        """Writing NAME directly into the container is validated like a rename."""
        model = FeatureModel("M")
        model.add_feature("A")
        b = model.add_feature("B")

        with pytest.raises(ValidationError):
            b.properties.set(NAME, "A")

        assert b.name == "B"

    def test_concurrent_renames_to_same_name(self):
        """Only one of many racing renames to one name can succeed."""
        model = FeatureModel("M")
        features = [model.add_feature(f"F{i}") for i in range(8)]
        barrier = threading.Barrier(len(features))
        succeeded = []
        rejected = []

        def rename(feature):
            barrier.wait()
            try:
                feature.properties.set(NAME, "Shared")
                succeeded.append(feature)
            except ValidationError:
                rejected.append(feature)

        threads = [threading.Thread(target=rename, args=(f,)) for f in features]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(succeeded) == 1
        assert len(rejected) == len(features) - 1
        assert [f.name for f in model.features].count("Shared") == 1
        assert model.get_feature("Shared") is succeeded[0]


class TestFeatureTree:
    """Test parent/child structure and hidden ancestors."""

    def test_children(self):
        model = FeatureModel("M")
        root = model.add_feature("Root")
        child = model.add_feature("Child", parent=root)
        assert child.parent is root
        assert root.children == [child]
        assert model.root is root

    def test_hidden_parent(self):
        """A feature below a hidden feature has a hidden parent."""
        model = FeatureModel("M")
        root = model.add_feature("Root")
        hidden = model.add_feature("Hidden", parent=root, hidden=True)
        leaf = model.add_feature("Leaf", parent=hidden)

        assert not leaf.is_hidden()
        assert leaf.has_hidden_parent()
        assert not hidden.has_hidden_parent()
        assert not root.has_hidden_parent()

    def test_hidden_grandparent(self):
        model = FeatureModel("M")
        top = model.add_feature("Top", hidden=True)
        middle = model.add_feature("Middle", parent=top)
        bottom = model.add_feature("Bottom", parent=middle)
        assert bottom.has_hidden_parent()

    def test_parent_from_other_model_rejected(self):
        other = FeatureModel("Other").add_feature("X")
        with pytest.raises(ValueError):
            FeatureModel("M").add_feature("Y", parent=other)


class TestFeatureModel:
    """Test FeatureModel lookups and constraint ownership."""

    def test_get_feature(self):
        model = FeatureModel("M")
        a = model.add_feature("A")
        assert model.get_feature("A") is a
        assert model.get_feature("Z") is None
        assert "A" in model
        assert "Z" not in model

    def test_features_is_copy(self):
        model = FeatureModel("M")
        model.add_feature("A")
        model.features.clear()
        assert len(model.features) == 1

    def test_create_constraint_from_text(self):
        model = FeatureModel("M")
        model.add_feature("A")
        model.add_feature("B")
        constraint = model.create_constraint("A => !B")
        assert model.constraints == [constraint]
        assert [f.name for f in constraint.get_contained_features()] == ["A", "B"]

    def test_create_constraint_with_origin(self):
        model = FeatureModel("M")
        model.add_feature("A")
        constraint = model.create_constraint(var("A"), origin=Origin.external("lib"))
        assert constraint.is_from_external_source()

    def test_create_constraint_unresolved(self):
        model = FeatureModel("M")
        with pytest.raises(UnresolvedVariableError):
            model.create_constraint("Missing")
        assert model.constraints == []

    def test_add_foreign_constraint_rejected(self):
        other = FeatureModel("Other")
        other.add_feature("A")
        constraint = Constraint(other, var("A"))
        with pytest.raises(ValueError):
            FeatureModel("M").add_constraint(constraint)

    def test_add_constraint_once(self):
        model = FeatureModel("M")
        model.add_feature("A")
        constraint = Constraint(model, var("A"))
        model.add_constraint(constraint)
        model.add_constraint(constraint)
        assert model.constraints == [constraint]

    def test_remove_constraint(self):
        model = FeatureModel("M")
        model.add_feature("A")
        constraint = model.create_constraint(var("A"))
        assert model.remove_constraint(constraint) is True
        assert model.constraints == []
        assert model.remove_constraint(constraint) is False

    def test_model_properties(self):
        model = FeatureModel("M")
        model.properties.set(TAGS, OrderedSet(["release"]))
        assert model.properties.get(TAGS) == {"release"}
        assert model.feature_model is model


class TestModelClone:
    """Test whole-model cloning."""

    def build(self):
        model = FeatureModel("M")
        root = model.add_feature("Root", abstract=True)
        model.add_feature("A", parent=root)
        model.add_feature("B", parent=root, hidden=True)
        model.add_feature(parent=root)
        constraint = model.create_constraint(and_(var("A"), not_(var("B"))))
        constraint.set_tags({"t"})
        return model

    def test_features_copied(self):
        model = self.build()
        clone = model.clone()

        assert [f.name for f in clone.features] == [f.name for f in model.features]
        for old, new in zip(model.features, clone.features):
            assert new is not old
            assert new.feature_model is clone
            assert new.hidden == old.hidden
            assert new.abstract == old.abstract

    def test_tree_copied(self):
        clone = self.build().clone()
        root = clone.get_feature("Root")
        assert clone.root is root
        assert [c.name for c in root.children][:2] == ["A", "B"]
        assert clone.get_feature("A").parent is root

    def test_generated_names_kept(self):
        """Unnamed features keep their generated name in the copy."""
        model = self.build()
        unnamed = model.features[-1]
        clone = model.clone()
        assert clone.features[-1].name == unnamed.name

    def test_constraints_rebound(self):
        """Cloned constraints reference the clone's features."""
        model = self.build()
        clone = model.clone(name="Copy")

        assert clone.name == "Copy"
        [constraint] = clone.constraints
        assert constraint.feature_model is clone
        assert constraint.get_contained_features() == [clone.get_feature("A"), clone.get_feature("B")]
        assert constraint.get_tags() == {"t"}
        assert constraint.has_hidden_features()

    def test_clone_independent(self):
        model = self.build()
        clone = model.clone()
        clone.get_feature("A").name = "A2"
        clone.get_feature("B").hidden = False

        assert model.get_feature("A") is not None
        assert model.get_feature("B").hidden is True
