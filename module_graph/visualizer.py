"""
Chunk Visualizer
Interactive views of module dependency graphs, build order and cyclic chunks
"""

import plotly.graph_objects as go
import networkx as nx
from typing import Dict, Hashable, List, Optional, Tuple
import streamlit as st
import pandas as pd
import logging

from .chunks import Chunk, to_chunk_graph
from .cycle_detector import ProbeResult, get_sorted_chunks

logger = logging.getLogger(__name__)

CYCLIC_COLORS = ['#FF4444', '#FF8800', '#FFAA00', '#AA44FF', '#FF44AA']


class DependencyVisualizer:
    """Creates interactive visualizations for chunk analysis"""

    def __init__(self, graph: nx.DiGraph, large_graph_threshold: int = 100):
        self.graph = graph
        self.large_graph_threshold = large_graph_threshold
        self.layout_cache = {}
        self.chunk_graph = to_chunk_graph(graph)
        self.sorted_chunks = get_sorted_chunks(graph)

    def create_dependency_graph_plot(self) -> go.Figure:
        """Create an interactive dependency graph with cyclic chunks highlighted"""
        if self.graph.number_of_nodes() == 0:
            return self._create_empty_plot("No modules to visualize")

        pos = self._get_graph_layout()
        node_trace = self._create_node_trace(pos)
        edge_traces = self._create_edge_traces(pos)

        return go.Figure(data=edge_traces + [node_trace], layout=self._get_plot_layout())

    def _get_graph_layout(self) -> Dict:
        """Calculate graph layout using spring algorithm"""
        if 'spring' not in self.layout_cache:
            try:
                if self.graph.number_of_nodes() > self.large_graph_threshold:
                    pos = nx.spring_layout(self.graph, k=1, iterations=20, seed=42)
                else:
                    pos = nx.spring_layout(self.graph, k=2, iterations=50, seed=42)
            except Exception as e:
                logger.error(f"Error calculating layout: {e}")
                pos = nx.circular_layout(self.graph)
            self.layout_cache['spring'] = pos

        return self.layout_cache['spring']

    def _chunk_colors(self) -> Dict[Chunk, str]:
        cyclic = [chunk for chunk in self.sorted_chunks if chunk.is_cyclic]
        return {chunk: CYCLIC_COLORS[i % len(CYCLIC_COLORS)] for i, chunk in enumerate(cyclic)}

    def _create_node_trace(self, pos: Dict) -> go.Scatter:
        """Create node trace for the graph"""
        colors = self._chunk_colors()
        build_index = {chunk: i for i, chunk in enumerate(self.sorted_chunks)}

        node_x, node_y, labels, hover, node_colors, node_sizes = [], [], [], [], [], []
        for node in self.graph.nodes():
            x, y = pos[node]
            node_x.append(x)
            node_y.append(y)

            chunk = self.chunk_graph.chunk_of(node)
            color, size = self._get_node_style(node, colors.get(chunk))
            node_colors.append(color)
            node_sizes.append(size)
            labels.append(str(node))

            hover_text = f"<b>{node}</b><br>"
            hover_text += f"Build step: {build_index[chunk] + 1}<br>"
            hover_text += f"Dependencies: {self.graph.out_degree(node)}<br>"
            hover_text += f"Dependents: {self.graph.in_degree(node)}"
            if chunk.is_cyclic:
                hover_text += f"<br><b>⚠️ Cycle of {len(chunk)}</b>"
            hover.append(hover_text)

        return go.Scatter(
            x=node_x, y=node_y,
            mode='markers+text',
            text=labels,
            textposition="top center",
            textfont=dict(size=9),
            hovertemplate='%{hovertext}<extra></extra>',
            hovertext=hover,
            marker=dict(
                size=node_sizes,
                color=node_colors,
                line=dict(width=2, color='white'),
                opacity=0.85
            ),
            name="Modules"
        )

    def _get_node_style(self, node: Hashable, chunk_color: Optional[str]) -> Tuple[str, int]:
        """Determine node color and size based on its characteristics"""
        size = 15
        degree = self.graph.degree(node)
        if degree > 10:
            size = 25
        elif degree > 5:
            size = 20

        return (chunk_color or '#44AA44'), size

    def _create_edge_traces(self, pos: Dict) -> List[go.Scatter]:
        """Create edge traces, drawing edges inside a cyclic chunk in red"""
        regular_x, regular_y = [], []
        cycle_x, cycle_y = [], []

        for source, target in self.graph.edges():
            x0, y0 = pos[source]
            x1, y1 = pos[target]
            if self.chunk_graph.chunk_of(source).contains(target):
                cycle_x.extend([x0, x1, None])
                cycle_y.extend([y0, y1, None])
            else:
                regular_x.extend([x0, x1, None])
                regular_y.extend([y0, y1, None])

        edge_traces = []
        if regular_x:
            edge_traces.append(go.Scatter(
                x=regular_x, y=regular_y,
                line=dict(width=1, color='#888'),
                hoverinfo='none',
                mode='lines',
                name="Dependencies"
            ))
        if cycle_x:
            edge_traces.append(go.Scatter(
                x=cycle_x, y=cycle_y,
                line=dict(width=3, color='#FF4444'),
                hoverinfo='none',
                mode='lines',
                name="Cyclic Dependencies"
            ))
        return edge_traces

    def _get_plot_layout(self) -> dict:
        """Get layout configuration for the plot"""
        return dict(
            title=dict(text="Module Dependency Graph", font=dict(size=16)),
            showlegend=True,
            hovermode='closest',
            margin=dict(b=20, l=5, r=5, t=40),
            annotations=[dict(
                text="Hover over modules for details. Red edges lie inside a cycle.",
                showarrow=False,
                xref="paper", yref="paper",
                x=0.005, y=-0.002,
                xanchor='left', yanchor='bottom',
                font=dict(color="#888", size=12)
            )],
            xaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
            yaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
            plot_bgcolor='white'
        )

    def _create_empty_plot(self, message: str) -> go.Figure:
        """Create an empty plot with a message"""
        fig = go.Figure()
        fig.add_annotation(
            text=message,
            xref="paper", yref="paper",
            x=0.5, y=0.5,
            showarrow=False,
            font=dict(size=16, color="gray")
        )
        fig.update_layout(
            xaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
            yaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
            plot_bgcolor='white'
        )
        return fig

    def create_chunk_size_chart(self) -> go.Figure:
        """Create a histogram of cyclic chunk sizes"""
        sizes = [len(chunk) for chunk in self.sorted_chunks if chunk.is_cyclic]
        if not sizes:
            return self._create_empty_plot("No circular dependencies found")

        fig = go.Figure(data=[
            go.Histogram(
                x=sizes,
                nbinsx=min(10, max(sizes)),
                marker_color='#4444FF',
                opacity=0.7
            )
        ])
        fig.update_layout(
            title="Cyclic Chunk Size Distribution",
            xaxis_title="Chunk Size (Number of Modules)",
            yaxis_title="Number of Chunks",
            plot_bgcolor='white'
        )
        return fig

    def build_order_frame(self) -> pd.DataFrame:
        """Ordered chunk list as a table"""
        step_of = {chunk: i + 1 for i, chunk in enumerate(self.sorted_chunks)}
        return pd.DataFrame([
            {
                'Step': i + 1,
                'Modules': ', '.join(str(node) for node in chunk.nodes),
                'Size': len(chunk),
                'Cyclic': '✓' if chunk.is_cyclic else '',
                'Depends On Steps': ', '.join(
                    str(step_of[dep]) for dep in self.chunk_graph.dependencies(chunk)
                ),
            }
            for i, chunk in enumerate(self.sorted_chunks)
        ])

    def display_build_order_table(self):
        """Display the build order in a table"""
        if not self.sorted_chunks:
            st.info("The project has no modules.")
            return
        st.dataframe(self.build_order_frame(), use_container_width=True, hide_index=True)

    @staticmethod
    def display_chunk_details_table(chunks: List[Chunk], max_low_risk_size: int = 2,
                                    max_medium_risk_size: int = 4):
        """Display cyclic chunks with a risk level based on their size"""
        if not chunks:
            st.success("🎉 No circular dependencies found!")
            return

        table_data = []
        for i, chunk in enumerate(chunks):
            table_data.append({
                'Chunk': i + 1,
                'Size': len(chunk),
                'Members': ', '.join(str(node) for node in chunk.nodes),
                'Risk Level': DependencyVisualizer._assess_chunk_risk(len(chunk), max_low_risk_size, max_medium_risk_size)
            })

        df = pd.DataFrame(table_data)

        def style_risk(val):
            colors = {
                'High': 'background-color: #ffebee',
                'Medium': 'background-color: #fff3e0',
                'Low': 'background-color: #f1f8e9'
            }
            return colors.get(val, '')

        styled_df = df.style.map(style_risk, subset=['Risk Level'])
        st.dataframe(styled_df, use_container_width=True, hide_index=True)

    @staticmethod
    def _assess_chunk_risk(size: int, max_low_risk_size: int, max_medium_risk_size: int) -> str:
        """Assess risk level based on chunk size"""
        if size > max_medium_risk_size:
            return 'High'
        elif size > max_low_risk_size:
            return 'Medium'
        else:
            return 'Low'

    @staticmethod
    def display_probe_result(source: Hashable, target: Hashable, result: ProbeResult):
        """Describe a circularity probe result to the user"""
        if not result.creates_cycle:
            st.success(f"✅ {source} can depend on {target} without creating a new cycle.")
            return

        first, second = result.witness
        st.error(f"🚨 Making {first} depend on {second} creates a circular dependency.")
        st.write("**Modules in the resulting cycle:** " + ', '.join(str(node) for node in result.chunk.nodes))
