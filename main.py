"""
Continuous live simulation: sensory neurons receive random stimulus, spikes
propagate, weights adapt and weak connections are pruned in real time.
"""

from __future__ import annotations
import logging
import random

import pygame

import config
from neural.network import Network
from render.renderer import draw_network, draw_hud
from render import colors

logger = logging.getLogger(__name__)


def inject_stimulus(net: Network, rng: random.Random) -> int:
    """Random exogenous input into sensory neurons. Returns how many were driven."""
    lo, hi = config.STIMULUS_RANGE
    driven = 0
    for nid in net.sensory_ids():
        if rng.random() < config.STIMULUS_PROBABILITY:
            net.stimulate(nid, rng.uniform(lo, hi))
            driven += 1
    return driven


def network_stats(net: Network, tick: int) -> dict:
    neurons = list(net.neurons.values())
    avg_sw = sum(n.sw for n in neurons) / len(neurons) if neurons else 0.0
    return {
        "tick": tick,
        "neurons": len(neurons),
        "connections": net.connection_count(),
        "fired": len(net.last_fired),
        "pruned": net.pruned_total,
        "avg_sw": avg_sw,
    }


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    pygame.init()
    screen = pygame.display.set_mode((config.SCREEN_W, config.SCREEN_H))
    pygame.display.set_caption("neuron_sim (Live Plasticity)")
    clock = pygame.time.Clock()

    rng = random.Random(1)
    net = Network.build_random(seed=1)

    tick = 0
    debug = False
    running = True

    while running:
        clock.tick(config.FPS)

        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
            elif e.type == pygame.KEYDOWN and e.key == pygame.K_TAB:
                debug = not debug

        for _ in range(max(1, config.SIM_SPEED)):
            inject_stimulus(net, rng)
            net.step(tick)
            tick += 1

        # Render
        screen.fill(colors.BG)
        draw_network(screen, net, debug=debug)
        draw_hud(screen, network_stats(net, tick))

        pygame.display.flip()

    logger.info("stopped at tick %d: %s", tick, network_stats(net, tick))
    pygame.quit()


if __name__ == "__main__":
    main()
