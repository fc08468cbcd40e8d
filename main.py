import streamlit as st
import os
from typing import Dict, List, Optional
from dataclasses import dataclass
import logging
from dotenv import load_dotenv
load_dotenv()

from module_graph import CycleDetector, ModuleGraphError, ModuleRegistry, SourceKind
from module_graph.graph_builder import get_graph_stats
from module_graph.project import get_cyclic_dependencies
from module_graph.visualizer import DependencyVisualizer

# =============================================================================
# CONFIGURATION
# =============================================================================

class Config:
    """Configuration read from the environment"""
    LOG_LEVEL = os.getenv("MODULE_GRAPH_LOG_LEVEL", "INFO").upper()

    # Sample project shown when nothing is uploaded
    DEFAULT_PROJECT_FILE = os.getenv(
        "MODULE_GRAPH_DEFAULT_PROJECT",
        os.path.join(os.path.dirname(os.path.abspath(__file__)), "sample_project.json"),
    )

    # Graphs above this many nodes use a cheaper layout
    LARGE_GRAPH_THRESHOLD = int(os.getenv("MODULE_GRAPH_LARGE_GRAPH_THRESHOLD", "100"))

    # Chunk risk thresholds
    MAX_LOW_RISK_CHUNK_SIZE = 2
    MAX_MEDIUM_RISK_CHUNK_SIZE = 4


logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)

# =============================================================================
# DATA MODELS
# =============================================================================

@dataclass
class ProjectAnalysisResult:
    """Data model for project analysis results"""
    registry: ModuleRegistry
    detector: CycleDetector
    analysis_summary: Dict
    graph_stats: Dict


def analyze_project(content: str) -> ProjectAnalysisResult:
    registry = ModuleRegistry.from_json(content)
    detector = registry.detector()
    return ProjectAnalysisResult(
        registry=registry,
        detector=detector,
        analysis_summary=detector.get_analysis_summary(),
        graph_stats=get_graph_stats(detector.graph),
    )


def load_default_project() -> Optional[str]:
    try:
        with open(Config.DEFAULT_PROJECT_FILE, encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        logger.warning(f"Could not read sample project {Config.DEFAULT_PROJECT_FILE}: {e}")
        return None


def main():
    st.set_page_config(page_title="Module Graph", page_icon="🔗", layout="wide")

    st.title("🔗 Module Graph - build order and circular dependencies")
    st.markdown("##### Upload a project description to see the build order of its modules and every dependency cycle.")

    with st.sidebar:
        st.header("⚙️ Project")
        uploaded_file = st.file_uploader("Upload project JSON", type=['json'], key="project_file")
        st.caption('Format: `{"modules": [{"name": "core", "dependencies": ["util"], "sources": ["production", "test"]}]}`')

        content = uploaded_file.read().decode('utf-8') if uploaded_file is not None else load_default_project()
        if content is None:
            st.info("👈 Upload a project description to start.")
            return

        if st.button("🔍 Analyze Project", type="primary", use_container_width=True) or 'project_analysis' not in st.session_state:
            try:
                with st.spinner("Analyzing module graph..."):
                    st.session_state.project_analysis = analyze_project(content)
            except ModuleGraphError as e:
                st.error(f"Error processing project: {e}")
                st.session_state.pop('project_analysis', None)
                return

    result: ProjectAnalysisResult = st.session_state.project_analysis
    summary = result.analysis_summary

    # --- Quick stats ---
    stat_col1, stat_col2, stat_col3, stat_col4 = st.columns(4)
    with stat_col1:
        st.metric("Modules", result.graph_stats['total_nodes'])
    with stat_col2:
        st.metric("Dependencies", result.graph_stats['total_dependencies'])
    with stat_col3:
        st.metric("Build Steps", summary['chunks']['count'])
    with stat_col4:
        st.metric("Cycles", summary['chunks']['cyclic_count'])

    if summary['is_dag']:
        st.success("✅ **Healthy**: No circular dependencies between modules!")
    else:
        st.warning(f"⚠️ **Warning**: {summary['chunks']['cyclic_count']} groups of modules depend on each other.")

    visualizer = DependencyVisualizer(result.detector.graph, Config.LARGE_GRAPH_THRESHOLD)
    tab1, tab2, tab3, tab4, tab5 = st.tabs([
        "🏗️ Build Order",
        "🔁 Cycles",
        "📊 Graph Visualization",
        "🧪 Source Sets",
        "❓ What If",
    ])

    with tab1:
        st.subheader("🏗️ Build Order")
        st.caption("Each step only depends on earlier steps. Modules in one step must be built together.")
        visualizer.display_build_order_table()

    with tab2:
        st.subheader("🔁 Circular Dependencies")
        cyclic = result.detector.cyclic_chunks()
        DependencyVisualizer.display_chunk_details_table(
            cyclic, Config.MAX_LOW_RISK_CHUNK_SIZE, Config.MAX_MEDIUM_RISK_CHUNK_SIZE
        )
        if cyclic:
            st.plotly_chart(visualizer.create_chunk_size_chart(), use_container_width=True)

    with tab3:
        st.subheader("📊 Dependency Graph Visualization")
        st.plotly_chart(visualizer.create_dependency_graph_plot(), use_container_width=True)

        stats_col1, stats_col2, stats_col3 = st.columns(3)
        with stats_col1:
            st.metric("Graph Density", f"{result.graph_stats['density']:.3f}")
        with stats_col2:
            st.metric("Average Degree", f"{result.graph_stats['average_degree']:.1f}")
        with stats_col3:
            st.metric("Weakly Connected", "Yes" if result.graph_stats['is_connected'] else "No")

    with tab4:
        st.subheader("🧪 Production and Test Sources")
        st.caption("Test sources depend on their own module's production sources.")
        selected: List[str] = st.multiselect(
            "Limit to modules", result.registry.get_modules(), default=result.registry.get_modules()
        )
        source_cycles = get_cyclic_dependencies(result.registry, selected)
        DependencyVisualizer.display_chunk_details_table(
            source_cycles, Config.MAX_LOW_RISK_CHUNK_SIZE, Config.MAX_MEDIUM_RISK_CHUNK_SIZE
        )
        only_test = [
            chunk for chunk in source_cycles
            if all(node.kind is SourceKind.TEST for node in chunk.nodes)
        ]
        if only_test:
            st.info(f"{len(only_test)} of these cycles involve test sources only.")

    with tab5:
        st.subheader("❓ What if a module gained a dependency?")
        modules = result.registry.get_modules()
        probe_col1, probe_col2 = st.columns(2)
        with probe_col1:
            source = st.selectbox("Module", modules, key="probe_source")
        with probe_col2:
            target = st.selectbox("Would depend on", modules, key="probe_target")

        if st.button("Check", key="probe_button"):
            if source == target:
                st.warning("Pick two different modules.")
            else:
                probe = result.detector.would_create_cycle(source, target)
                DependencyVisualizer.display_probe_result(source, target, probe)


if __name__ == "__main__":
    main()
