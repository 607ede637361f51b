"""StateGraph definition: the Timeline Synthesizer's fixed stage order."""

from __future__ import annotations

from langgraph.graph import END, StateGraph

from auto_shorts.graph.edges import route_after_master, route_after_mix
from auto_shorts.graph.state import PipelineState
from auto_shorts.nodes.assemble_master import assemble_master
from auto_shorts.nodes.assign_offsets import assign_offsets
from auto_shorts.nodes.compose_scene import compose_scene
from auto_shorts.nodes.mix_background import mix_background
from auto_shorts.nodes.prepare_run import prepare_run
from auto_shorts.nodes.render_video import render_video
from auto_shorts.nodes.resolve_assets import resolve_assets
from auto_shorts.nodes.synthesize_speech import synthesize_speech
from auto_shorts.nodes.transcribe import prepare_transcription, transcribe_subtitles


def build_graph():
    """Build and compile the generation graph.

    Stages run strictly one after another; an exception in any node ends the
    run. No checkpointer is attached, runs are not resumable.

    Returns:
        Compiled StateGraph ready for invocation.
    """
    graph = StateGraph(PipelineState)

    # Add nodes
    graph.add_node("prepare_run", prepare_run)
    graph.add_node("synthesize_speech", synthesize_speech)
    graph.add_node("assemble_master", assemble_master)
    graph.add_node("mix_background", mix_background)
    graph.add_node("prepare_transcription", prepare_transcription)
    graph.add_node("transcribe_subtitles", transcribe_subtitles)
    graph.add_node("resolve_assets", resolve_assets)
    graph.add_node("assign_offsets", assign_offsets)
    graph.add_node("compose_scene", compose_scene)
    graph.add_node("render_video", render_video)

    # Entry point
    graph.set_entry_point("prepare_run")

    graph.add_edge("prepare_run", "synthesize_speech")
    graph.add_edge("synthesize_speech", "assemble_master")

    # Background mixing and transcription are config-gated
    graph.add_conditional_edges(
        "assemble_master",
        route_after_master,
        {
            "mix_background": "mix_background",
            "prepare_transcription": "prepare_transcription",
            "resolve_assets": "resolve_assets",
        },
    )
    graph.add_conditional_edges(
        "mix_background",
        route_after_mix,
        {
            "prepare_transcription": "prepare_transcription",
            "resolve_assets": "resolve_assets",
        },
    )
    graph.add_edge("prepare_transcription", "transcribe_subtitles")
    graph.add_edge("transcribe_subtitles", "resolve_assets")

    # resolve_assets → assign_offsets → compose_scene → render_video
    graph.add_edge("resolve_assets", "assign_offsets")
    graph.add_edge("assign_offsets", "compose_scene")
    graph.add_edge("compose_scene", "render_video")
    graph.add_edge("render_video", END)

    return graph.compile()
