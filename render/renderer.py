"""
neuron_sim module: render/renderer.py

Pygame rendering of a network (top-down projection; z only shades size).
"""

from __future__ import annotations
import pygame

import config
from neural.network import Network
from neural.neuron import Neuron, NeuronType, Neurotransmitter
from render import colors


def _radius(n: Neuron) -> int:
    # nearer (smaller z) somas draw larger
    depth = max(0.0, min(1.0, n.z / config.WORLD_DEPTH)) if config.WORLD_DEPTH > 0 else 0.0
    return int(7 - 3 * depth)


def _soma_color(n: Neuron) -> tuple[int, int, int]:
    if n.nt == NeuronType.SENSORY:
        return colors.SENSORY
    if n.nt == NeuronType.MOTOR:
        return colors.MOTOR
    return colors.CONTACT


def draw_network(screen: pygame.Surface, net: Network, debug: bool = False) -> None:
    debug_font = pygame.font.Font(None, 16) if debug else None
    fired = set(net.last_fired)

    # connections first: axon terminal -> target soma, width by weight
    for n in net.neurons.values():
        col = colors.EXCITATORY_EDGE if n.nrt == Neurotransmitter.EXCITATORY else colors.INHIBITORY_EDGE
        width = 1 + int(2 * n.sw / n.sw_max) if n.sw_max > 0 else 1
        for target in n.ac:
            t = net.neurons.get(target)
            if t is None:
                continue
            pygame.draw.line(screen, col, (n.ax, n.ay), (t.x, t.y), width)

    # somas + axons
    for n in net.neurons.values():
        pygame.draw.line(screen, colors.AXON, (n.x, n.y), (n.ax, n.ay), 2)
        col = colors.FIRED if n.id in fired else _soma_color(n)
        pygame.draw.circle(screen, col, (int(n.x), int(n.y)), _radius(n))

        if debug and debug_font is not None:
            txt = debug_font.render(f"{n.id} sw:{n.sw:.2f}", True, colors.LABEL)
            screen.blit(txt, (n.x + 8, n.y - 10))


def draw_hud(screen: pygame.Surface, stats: dict) -> None:
    font = pygame.font.Font(None, 26)

    lines = [
        f"Tick: {stats.get('tick', 0)}",
        f"Neurons: {stats.get('neurons', 0)}  Connections: {stats.get('connections', 0)}",
        f"Fired: {stats.get('fired', 0)}  Pruned: {stats.get('pruned', 0)}",
        f"Avg weight: {stats.get('avg_sw', 0.0):.3f}",
    ]

    y = 10
    for line in lines:
        txt = font.render(line, True, colors.HUD)
        screen.blit(txt, (12, y))
        y += 22
