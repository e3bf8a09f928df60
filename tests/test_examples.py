from sdkfoundry.pipelines.examples import (
    CATEGORY_RULES,
    ExampleHarvester,
    categorize,
    classify_imports,
    find_init_pattern,
    tag,
    title_from_dir,
)
from sdkfoundry.pipelines.models import IngestStats


def test_harvest_fixture_examples(sdk_repo, settings):
    stats = IngestStats()
    examples = ExampleHarvester(sdk_repo, settings, stats).harvest()

    assert [e.title for e in examples] == ["Grab Ball", "Grab Cube", "Physics Drop"]
    assert stats.examples_skipped == 1

    ball, cube, physics = examples
    assert ball.file_path == "examples/grab-ball/src/index.ts"
    assert ball.description == "Example: Grab Ball"
    assert ball.components_used == ["Interactable", "OneHandGrabbable"]
    assert ball.systems_used == ["GrabSystem"]
    assert ball.category == "interaction"
    assert ball.tags == ["interactable", "grabbing"]
    assert ball.init_pattern.startswith("World.create(")

    assert cube.file_path == "examples/grab-cube/src/main.ts"
    assert cube.init_pattern is None
    assert "initPattern" not in cube.to_dict()

    assert physics.category == "physics"
    assert physics.systems_used == ["PhysicsSystem"]
    assert physics.tags == ["physics"]


def test_missing_examples_dir_yields_nothing(tmp_path, settings):
    assert ExampleHarvester(tmp_path, settings).harvest() == []


def test_entry_file_priority(tmp_path, settings):
    src = tmp_path / "examples" / "demo" / "src"
    src.mkdir(parents=True)
    for name in ("main.js", "main.ts", "index.ts"):
        (src / name).write_text(f"// {name}\n")

    harvester = ExampleHarvester(tmp_path, settings)
    assert harvester.find_entry(tmp_path / "examples" / "demo").name == "index.ts"

    (src / "index.js").write_text("// index.js\n")
    assert harvester.find_entry(tmp_path / "examples" / "demo").name == "index.js"


def test_category_rule_precedence():
    code = "PhysicsSystem; UIKitDocument; Interactable"
    assert categorize(code) == "interaction"
    assert categorize("UIKitDocument and LocomotionSystem") == "ui"
    assert categorize("onClick handler") == "interaction"
    assert categorize("nothing special") == "setup"
    assert [category for _, category in CATEGORY_RULES] == ["interaction", "physics", "ui", "locomotion"]


def test_tags_are_independent():
    code = "Interactable DistanceGrabbable PhysicsBody UIKitDocument LocomotionSystem AudioSystem"
    assert tag(code) == ["interactable", "grabbing", "physics", "ui", "locomotion", "audio"]
    assert tag("plain") == []


def test_classify_imports():
    code = """
import { Interactable, GrabSystem, createComponent, Types as T } from '@iwsdk/core';
import { type Handedness, XRInputSystem } from "@iwsdk/xr-input";
import { Vector3 } from 'three';
"""
    components, systems = classify_imports(code)
    assert components == ["Interactable", "Types"]
    assert systems == ["GrabSystem", "XRInputSystem"]


def test_type_only_imports_are_not_components():
    code = "import { type Handedness, type PhysicsBody, PhysicsShape } from '@iwsdk/core';\n"

    components, systems = classify_imports(code)

    assert components == ["PhysicsShape"]
    assert systems == []


def test_title_and_init_pattern():
    assert title_from_dir("spatial-ui-panels") == "Spatial Ui Panels"
    assert find_init_pattern("World.create(container, { xr: true });").startswith("World.create(container")
    assert find_init_pattern("new World()") is None
