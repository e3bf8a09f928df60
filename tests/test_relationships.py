import pytest

from sdkfoundry.pipelines.models import ComponentRecord, ExampleRecord, SystemRecord
from sdkfoundry.pipelines.relationships import (
    KNOWN_REQUIREMENTS,
    analyze_co_occurrences,
    infer_requires,
    link_systems,
    mine_compositions,
)


def component(name: str, file_path: str = "packages/core/src/c.ts") -> ComponentRecord:
    return ComponentRecord(name=name, package="@iwsdk/core", file_path=file_path)


def example(title: str, *components: str, category: str = "setup") -> ExampleRecord:
    return ExampleRecord(title=title, file_path=f"examples/{title}/src/index.ts", description=title,
                         code="", category=category, components_used=list(components))


def test_known_table_applies_without_other_evidence():
    components = {"OneHandGrabbable": component("OneHandGrabbable")}
    infer_requires(components)
    assert components["OneHandGrabbable"].requires == ["Interactable"]


def test_requires_merges_all_sources_in_order():
    components = {
        "PhysicsBody": component("PhysicsBody", "packages/core/src/physics.ts"),
        "AudioSource": component("AudioSource", "packages/core/src/audio.ts"),
    }
    declared = {"PhysicsBody": ["PhysicsShape", "Transform"]}
    lookups = {
        "packages/core/src/physics.ts": ["PhysicsBody", "Transform", "Collider"],
        "packages/core/src/audio.ts": ["AudioListener"],
    }

    infer_requires(components, declared, lookups)

    assert components["PhysicsBody"].requires == ["PhysicsShape", "Transform", "Collider"]
    assert components["AudioSource"].requires == ["AudioListener"]


def test_known_table_can_be_replaced():
    components = {"OneHandGrabbable": component("OneHandGrabbable")}
    infer_requires(components, known=())
    assert components["OneHandGrabbable"].requires == []


def test_known_table_entries():
    known = dict(KNOWN_REQUIREMENTS)
    assert known["PhysicsBody"] == ("PhysicsShape",)
    assert all(known[name] == ("Interactable",) for name in
               ("OneHandGrabbable", "TwoHandsGrabbable", "DistanceGrabbable"))


def test_link_systems_records_queriers_once():
    components = {"Interactable": component("Interactable")}
    systems = {
        "GrabSystem": SystemRecord(name="GrabSystem", package="@iwsdk/core", file_path="g.ts",
                                   queries_components=["Interactable", "Missing"]),
        "HoverSystem": SystemRecord(name="HoverSystem", package="@iwsdk/core", file_path="h.ts",
                                    queries_components=["Interactable"]),
    }

    link_systems(components, systems)
    link_systems(components, systems)

    assert components["Interactable"].used_by_systems == ["GrabSystem", "HoverSystem"]


def test_co_occurrence_share_and_optional_band():
    components = {"PhysicsBody": component("PhysicsBody"), "PhysicsShape": component("PhysicsShape")}
    examples = [
        example("a", "PhysicsBody", "PhysicsShape"),
        example("b", "PhysicsBody", "PhysicsShape"),
        example("c", "PhysicsBody", "PhysicsShape"),
        example("d", "PhysicsBody"),
    ]

    analyze_co_occurrences(components, examples)

    body = components["PhysicsBody"]
    assert body.co_occurrences["PhysicsShape"] == pytest.approx(0.75)
    assert body.optional_with == ["PhysicsShape"]

    shape = components["PhysicsShape"]
    assert shape.co_occurrences["PhysicsBody"] == 1.0
    assert shape.optional_with == []


def test_co_occurrence_bounds_are_exclusive():
    components = {"A": component("A")}
    examples = [example("1", "A", "B"), example("2", "A")]

    analyze_co_occurrences(components, examples, lower=0.5, upper=1.0)

    assert components["A"].co_occurrences == {"B": 0.5}
    assert components["A"].optional_with == []


def test_co_occurrence_counts_an_example_once():
    components = {"A": component("A")}
    analyze_co_occurrences(components, [example("1", "A", "B", "B", "A")])
    assert components["A"].co_occurrences == {"B": 1.0}


def test_co_occurrence_values_stay_in_unit_interval():
    components = {name: component(name) for name in "ABC"}
    examples = [example("1", "A", "B"), example("2", "A", "C"), example("3", "B", "C"), example("4", "A")]

    analyze_co_occurrences(components, examples)

    for record in components.values():
        assert all(0 < freq <= 1 for freq in record.co_occurrences.values())


def test_component_without_examples_is_untouched():
    components = {"Lonely": component("Lonely")}
    analyze_co_occurrences(components, [example("1", "A", "B")])
    assert components["Lonely"].co_occurrences == {}


def test_two_examples_with_same_pair_make_one_composition():
    patterns = mine_compositions([example("x", "A", "B", category="interaction"), example("y", "B", "A")])

    assert len(patterns) == 1
    assert patterns[0].name == "A+B"
    assert patterns[0].components == ["A", "B"]
    assert patterns[0].frequency == 1.0
    assert patterns[0].category == "interaction"


def test_compositions_threshold_and_order():
    examples = [example(str(i), "X") for i in range(20)]
    examples += [example("p1", "A", "B"), example("p2", "A", "B"), example("single", "C", "D")]

    patterns = mine_compositions(examples)

    # C+D: one example out of 23 is below both thresholds
    assert [p.name for p in patterns] == ["A+B"]


def test_compositions_sorted_by_frequency():
    examples = [example("1", "C", "D"), example("2", "A", "B"), example("3", "A", "B")]
    patterns = mine_compositions(examples, min_count=1)
    assert [p.name for p in patterns] == ["A+B", "C+D"]
    assert all(0 < p.frequency <= 1 for p in patterns)


def test_no_examples_no_compositions():
    assert mine_compositions([]) == []
