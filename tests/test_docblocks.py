from sdkfoundry.pipelines.docblocks import DocBlock, is_doc_comment, parse_doc_comment, resolve_description


def test_summary_and_tags():
    block = parse_doc_comment("""/**
     * Lets a single hand pick up the entity.
     * Works with any mesh.
     * @remarks Pair with Interactable.
     * @category Grabbing
     * @example
     * entity.addComponent(OneHandGrabbable);
     */""")

    assert block.summary == "Lets a single hand pick up the entity.\nWorks with any mesh."
    assert block.remarks == "Pair with Interactable."
    assert block.category == "Grabbing"
    assert block.examples == ["entity.addComponent(OneHandGrabbable);"]


def test_requires_accumulates_comma_separated_names():
    block = parse_doc_comment("/**\n * Audio.\n * @requires Transform, AudioListener\n * @requires Spatial\n */")
    assert block.requires == ["Transform", "AudioListener", "Spatial"]


def test_unknown_tags_are_kept():
    block = parse_doc_comment("/** Thing.\n * @deprecated use Other\n */")
    assert block.summary == "Thing."
    assert block.tags["deprecated"] == ["use Other"]


def test_plain_comments_are_not_doc_comments():
    assert not is_doc_comment("/* plain */")
    assert not is_doc_comment("// line")
    assert not is_doc_comment("/**/")
    assert parse_doc_comment("/* plain */") == DocBlock()
    assert parse_doc_comment(None) == DocBlock()


def test_resolve_description_returns_first_non_blank():
    assert resolve_description(None, "  ", "From docs") == "From docs"
    assert resolve_description("Inline", "From docs") == "Inline"
    assert resolve_description(None, "") == ""
