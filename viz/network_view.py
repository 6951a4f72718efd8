# viz/network_view.py
from __future__ import annotations
from dataclasses import dataclass
import os
import numpy as np
import pygame as pg

from NN.neural_network import NeuralNetwork


# -----------------------
# View config (single spot)
# -----------------------
@dataclass
class ViewStyle:
    canvas_bg_rgba: tuple[int, int, int, int] = (255, 255, 255, 255)

    # Node look
    node_radius: int = 18
    node_fill: tuple[int, int, int] = (220, 220, 220)
    node_border: tuple[int, int, int] = (100, 100, 100)
    node_border_width: int = 2

    # Layout
    margin_ratio_x: float = 0.10
    margin_ratio_y: float = 0.08

    # Edge look
    edge_neutral_gray: tuple[int, int, int] = (180, 180, 180)
    edge_color_neg: tuple[int, int, int] = (255, 0, 0)   # -1
    edge_color_pos: tuple[int, int, int] = (0, 200, 0)   # +1
    edge_min_width: int = 1
    edge_max_width: int = 4

    # Text (node values)
    font_name: str | None = None   # default font
    font_size: int = 16
    text_color: tuple[int, int, int] = (130, 130, 30)
    value_decimals: int = 2
    show_values: bool = True


class NetworkView(pg.sprite.Sprite):
    def __init__(self, network: NeuralNetwork, canvas_size: tuple[int, int], style: ViewStyle | None = None):
        """
        network: a configured NeuralNetwork (hidden stack + output layer)
        canvas_size: (width, height)
        style: optional ViewStyle configuration
        """
        super().__init__()
        if not network.configured:
            raise ValueError("cannot draw a network without layers")
        if not pg.font.get_init():
            pg.font.init()
        self.network = network
        self.style = style or ViewStyle()

        self.image = pg.Surface(canvas_size, pg.SRCALPHA)
        self.rect = self.image.get_rect(topleft=(0, 0))
        self.font = pg.font.SysFont(self.style.font_name, self.style.font_size)

        self.shape = self.layer_sizes(network)
        self.node_centers: list[list[tuple[int, int]]] = self._compute_node_centers(canvas_size, self.shape)
        # Optional runtime data to show inside nodes (list of arrays matching layer sizes)
        self.node_values: list[np.ndarray] | None = None

        self.redraw()  # initial render

    @staticmethod
    def layer_sizes(network: NeuralNetwork) -> list[int]:
        """[inputs, hidden_1, ..., hidden_n, outputs]"""
        return [network.num_inputs] + [l.num_nodes for l in network.hidden_layers] + [network.num_outputs]

    # ---------- Public API ----------
    def show_prediction(self, input) -> np.ndarray:
        """Run predict() and display every layer's activations inside its nodes."""
        output = self.network.predict(input)
        values = [np.asarray(input, dtype=np.float64).reshape(-1)[: self.shape[0]]]
        values += [layer.output.copy() for layer in self.network.hidden_layers]
        values.append(output.copy())
        self.set_node_values(values)
        return output

    def set_node_values(self, values_by_layer: list[np.ndarray] | None) -> None:
        """
        values_by_layer must have one entry per layer in self.shape, each as long as that layer.
        Pass None to hide values.
        """
        if values_by_layer is not None:
            if len(values_by_layer) != len(self.shape):
                raise ValueError("node_values length must match number of layers")
            for arr, expected in zip(values_by_layer, self.shape):
                if len(arr) != expected:
                    raise ValueError("node_values per layer must match layer size")
        self.node_values = values_by_layer
        self.redraw()

    def redraw(self) -> None:
        """Re-render edges and nodes using current weights and node values."""
        self.image.fill(self.style.canvas_bg_rgba)
        self._draw_edges()
        self._draw_nodes(with_values=self.style.show_values)

    def save(self, path: str) -> str:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        pg.image.save(self.image, path)
        return path

    # ---------- Layout ----------
    def _compute_node_centers(self, canvas_size: tuple[int, int], layer_sizes: list[int]) -> list[list[tuple[int, int]]]:
        width, height = canvas_size
        margin_x = self.style.margin_ratio_x * width
        margin_y = self.style.margin_ratio_y * height

        num_layers = len(layer_sizes)
        layer_x_positions = [
            int(margin_x + i * (width - 2 * margin_x) / (num_layers - 1))
            for i in range(num_layers)
        ]

        centers: list[list[tuple[int, int]]] = []
        for layer_index, node_count in enumerate(layer_sizes):
            if node_count == 1:
                y_positions = [height // 2]
            else:
                y_positions = [
                    int(margin_y + j * (height - 2 * margin_y) / (node_count - 1))
                    for j in range(node_count)
                ]
            centers.append([(layer_x_positions[layer_index], y) for y in y_positions])
        return centers

    # ---------- Edges ----------
    def _collect_weight_matrices(self) -> list[np.ndarray]:
        """Weight matrices (shape: out_nodes x in_nodes), input side first."""
        layers = list(self.network.hidden_layers) + [self.network.output_layer]
        return [np.asarray(layer.weights) for layer in layers]

    def _weight_to_color(self, weight_value: float) -> tuple[int, int, int]:
        """
        Map weight in [-1,1] to red (neg) -> gray (0) -> green (pos).
        """
        w = float(np.clip(weight_value, -1.0, 1.0))
        if w < 0:
            t = w + 1.0  # [-1,0] -> [0,1]
            start, end = self.style.edge_color_neg, self.style.edge_neutral_gray
        else:
            t = w
            start, end = self.style.edge_neutral_gray, self.style.edge_color_pos
        return tuple(int((1 - t) * s + t * e) for s, e in zip(start, end))

    def _edge_width_from_weight(self, abs_weight: float, layer_max_abs: float) -> int:
        if layer_max_abs <= 0:
            return self.style.edge_min_width
        t = np.clip(abs_weight / layer_max_abs, 0.0, 1.0)
        return int(self.style.edge_min_width + t * (self.style.edge_max_width - self.style.edge_min_width))

    def _draw_edges(self) -> None:
        weight_matrices = self._collect_weight_matrices()

        for layer_index, weight_matrix in enumerate(weight_matrices):
            source_centers = self.node_centers[layer_index]
            target_centers = self.node_centers[layer_index + 1]
            layer_max_abs = float(np.abs(weight_matrix).max()) if weight_matrix.size else 0.0

            for tgt_idx, (tgt_x, tgt_y) in enumerate(target_centers):
                for src_idx, (src_x, src_y) in enumerate(source_centers):
                    w = float(weight_matrix[tgt_idx, src_idx])
                    color = self._weight_to_color(w)
                    width = self._edge_width_from_weight(abs(w), layer_max_abs)
                    pg.draw.line(self.image, color, (src_x, src_y), (tgt_x, tgt_y), width)

    # ---------- Nodes ----------
    def _draw_nodes(self, with_values: bool = True) -> None:
        for layer_index, centers in enumerate(self.node_centers):
            for node_index, (cx, cy) in enumerate(centers):
                pg.draw.circle(self.image, self.style.node_fill, (cx, cy), self.style.node_radius)
                pg.draw.circle(
                    self.image,
                    self.style.node_border,
                    (cx, cy),
                    self.style.node_radius,
                    width=self.style.node_border_width,
                )

                if with_values and self.node_values is not None:
                    val = float(self.node_values[layer_index][node_index])
                    text = f"{val:.{self.style.value_decimals}f}"
                    text_surface = self.font.render(text, True, self.style.text_color)
                    text_rect = text_surface.get_rect(center=(cx, cy))
                    self.image.blit(text_surface, text_rect)
