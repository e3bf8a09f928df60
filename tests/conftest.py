"""Shared fixtures: a small synthetic SDK checkout and a cache built from it."""

import json
import textwrap
from pathlib import Path

import pytest

from sdkfoundry.config import Settings
from sdkfoundry.pipelines import run_ingestion
from sdkfoundry.server.cache_loader import KnowledgeCache
from sdkfoundry.server.tools import ToolContext


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text).lstrip(), encoding='utf-8')
    return path


CORE_INTERACTION = """
import { createComponent, Types } from '../ecs';

/**
 * Marks an entity as interactive for pointers and hands.
 * @category Interaction
 */
export const Interactable = createComponent('Interactable', {}, 'Marks an entity as interactive');

/**
 * Lets a single hand pick up the entity.
 * @remarks Pair with Interactable.
 * @category Grabbing
 * @example
 * entity.addComponent(OneHandGrabbable, { rotate: true });
 */
export const OneHandGrabbable = createComponent('OneHandGrabbable', {
  /** Allow rotation while held */
  rotate: { type: Types.Boolean, default: true },
  translate: { type: Types.Boolean, default: true },
});
"""

CORE_PHYSICS = """
import { createComponent, Types } from '../ecs';

/** Rigid body simulated by the physics engine. */
export const PhysicsBody = createComponent('PhysicsBody', {
  state: { type: Types.Enum, default: 'dynamic' },
});

/** Collision shape used by PhysicsBody. */
export const PhysicsShape = createComponent('PhysicsShape', {
  shape: { type: Types.String, default: 'box' },
});

export enum PhysicsState {
  Static,
  Dynamic,
}
"""

CORE_AUDIO = """
import { createComponent, Types } from '../ecs';

/**
 * Positional audio emitter.
 * @requires Transform
 */
export const AudioSource = createComponent('AudioSource', {
  src: { type: Types.String, default: '' },
});

export function isPlaying(entity: Entity): boolean {
  return hasComponent(entity, AudioListener);
}
"""

CORE_GRAB_SYSTEM = """
import { createSystem } from '../ecs';
import { Interactable, OneHandGrabbable } from '../components/interaction';

/**
 * Moves grabbed entities with the hand holding them.
 * @category Grabbing
 */
export class GrabSystem extends createSystem({
  grabbable: { required: [Interactable, OneHandGrabbable] },
}) {
  /** Grab distance in meters */
  maxDistance: number = 2;

  /** Runs every frame */
  update(delta: number): void {
    for (const entity of this.queries.grabbable.entities) {
      entity.getValue(OneHandGrabbable, 'rotate');
    }
  }
}

export interface GrabOptions {
  rotate: boolean;
  distance?: number;
}

export type Handedness = 'left' | 'right';
"""

CORE_PHYSICS_SYSTEM = """
import { createSystem } from '../ecs';

/** Steps the physics world. */
export class PhysicsSystem extends createSystem({
  bodies: { required: [PhysicsBody, PhysicsShape] },
}) {
  init() {}
}
"""

INPUT_SYSTEM = """
/** Polls controllers and hands. */
export class InputSystem extends createSystem({}) {
  update(delta: number) {}
}
"""

GRAB_BALL = """
import { Interactable, OneHandGrabbable, GrabSystem } from '@iwsdk/core';

World.create(document.getElementById('scene-container'), { xr: true }).then((world) => {
  const ball = world.createTransformEntity();
  ball.addComponent(Interactable);
  ball.addComponent(OneHandGrabbable);
});
"""

GRAB_CUBE = """
import { OneHandGrabbable, Interactable } from '@iwsdk/core';

const cube = world.createTransformEntity();
cube.addComponent(Interactable).addComponent(OneHandGrabbable);
"""

PHYSICS_DROP = """
import { PhysicsBody, PhysicsShape, PhysicsSystem } from '@iwsdk/core';

world.registerSystem(PhysicsSystem);
const box = world.createTransformEntity();
box.addComponent(PhysicsShape).addComponent(PhysicsBody);
"""


@pytest.fixture
def sdk_repo(tmp_path) -> Path:
    """A minimal multi-package SDK checkout."""
    root = tmp_path / "immersive-web-sdk"
    core = root / "packages" / "core"
    write(core / "package.json", json.dumps({"name": "@iwsdk/core", "version": "0.2.1"}))
    write(core / "src" / "components" / "interaction.ts", CORE_INTERACTION)
    write(core / "src" / "components" / "physics.ts", CORE_PHYSICS)
    write(core / "src" / "components" / "audio.ts", CORE_AUDIO)
    write(core / "src" / "systems" / "grab.ts", CORE_GRAB_SYSTEM)
    write(core / "src" / "systems" / "physics.ts", CORE_PHYSICS_SYSTEM)
    write(core / "src" / "README.md", "not a source file\n")
    write(root / "packages" / "xr-input" / "src" / "input.ts", INPUT_SYSTEM)

    write(root / "examples" / "grab-ball" / "src" / "index.ts", GRAB_BALL)
    write(root / "examples" / "grab-cube" / "src" / "main.ts", GRAB_CUBE)
    write(root / "examples" / "physics-drop" / "src" / "index.ts", PHYSICS_DROP)
    write(root / "examples" / "no-entry" / "README.md", "# no sources\n")

    write(root / "docs" / "guides" / "ecs.md", "# ECS guide\n")
    write(root / "docs" / "guides" / "locomotion.md", "# Locomotion guide\n")
    write(root / ".git" / "HEAD", "ref: refs/heads/main\n")
    write(root / ".git" / "refs" / "heads" / "main", "abc123def\n")
    return root


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        config_path=str(tmp_path / "missing.yaml"),
        overrides={
            'cache_dir': str(tmp_path / "cache"),
            'telemetry_file': str(tmp_path / "telemetry.jsonl"),
        },
    )


@pytest.fixture
def ingested(sdk_repo, settings):
    """Result of a full ingestion run into settings.cache_dir."""
    return run_ingestion(sdk_repo, settings)


@pytest.fixture
def cache(ingested, settings) -> KnowledgeCache:
    return KnowledgeCache(settings=settings)


@pytest.fixture
def ctx(cache) -> ToolContext:
    return ToolContext(cache)


@pytest.fixture(autouse=True)
def restore_root_logging():
    """CLI entry points reconfigure the root logger; put it back afterwards."""
    import logging

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
