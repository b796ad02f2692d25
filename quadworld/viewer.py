"""
Pygame viewer for a QuadWorld
"""
import logging
from typing import Optional, Tuple

import pygame

from quadworld.constants import (
    BLACK, BLOCK_SIZE, CURSOR_COLOR, FPS, GENERATE_INTERVAL_MS, GRID_COLOR, SCREEN_HEIGHT,
    SCREEN_WIDTH, TERRAIN_COLORS, TILE_SIZE, TerrainType
)
from quadworld.path import Relation
from quadworld.store import Store
from quadworld.zones import Zone, ZoneMap

logger = logging.getLogger(__name__)

# Controls
KEY_LEFT = pygame.K_LEFT
KEY_RIGHT = pygame.K_RIGHT
KEY_UP = pygame.K_UP
KEY_DOWN = pygame.K_DOWN
KEY_NEW_GAME = pygame.K_n
KEY_QUIT = pygame.K_ESCAPE

GENERATE_EVENT = pygame.USEREVENT + 1


class Viewer:
    """Shows the active block and its neighbours while grass grows on a timer"""

    def __init__(self, store: Store):
        """
        Open the window

        Args:
            store: World to show
        """
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        pygame.display.set_caption("QuadWorld")
        self.clock = pygame.time.Clock()
        self.store = store
        self.zone_map = ZoneMap(store)
        self.running = False
        self.cursor: Tuple[int, int] = (BLOCK_SIZE // 2, BLOCK_SIZE // 2)
        self.region: Optional[Relation] = None

    def start(self) -> None:
        """Show the last active block"""
        self.zone_map.start()
        self.cursor = (BLOCK_SIZE // 2, BLOCK_SIZE // 2)
        self.region = None
        self._update_region()

    def new_game(self) -> None:
        logger.info("Starting a new world")
        self.store.clear()
        self.start()

    def move_cursor(self, dx: int, dy: int) -> None:
        """
        Move the cursor one cell, crossing into the neighbouring zone at an edge

        Args:
            dx: Horizontal step
            dy: Vertical step, up is positive
        """
        x, y = self.cursor[0] + dx, self.cursor[1] + dy
        crossing = Relation.from_vector(
            -1 if x < 0 else (1 if x >= BLOCK_SIZE else 0),
            -1 if y < 0 else (1 if y >= BLOCK_SIZE else 0),
        )
        if crossing != Relation.CENTER:
            zone = self.zone_map.add_adjacent(crossing)
            self.zone_map.change_active(zone)
            x %= BLOCK_SIZE
            y %= BLOCK_SIZE
            self.region = None
        self.cursor = (x, y)
        self._update_region()

    def _update_region(self) -> None:
        region = ZoneMap.region_at(*self.cursor)
        if region != self.region:
            self.region = region
            self.zone_map.enter(self.zone_map.active, region)

    def process_input(self) -> None:
        """Process user input and timer events"""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == GENERATE_EVENT:
                self.store.generate_vertex()
            elif event.type == pygame.KEYDOWN:
                if event.key == KEY_QUIT:
                    self.running = False
                elif event.key == KEY_NEW_GAME:
                    self.new_game()
                elif event.key == KEY_LEFT:
                    self.move_cursor(-1, 0)
                elif event.key == KEY_RIGHT:
                    self.move_cursor(1, 0)
                elif event.key == KEY_UP:
                    self.move_cursor(0, 1)
                elif event.key == KEY_DOWN:
                    self.move_cursor(0, -1)

    def _zone_origin(self, zone: Zone) -> Tuple[int, int]:
        """Screen position of a zone's top-left corner"""
        active = self.zone_map.active
        block_px = BLOCK_SIZE * TILE_SIZE
        center_x = (SCREEN_WIDTH - block_px) // 2
        center_y = (SCREEN_HEIGHT - block_px) // 2
        return (center_x + (zone.position[0] - active.position[0]) * block_px,
                center_y - (zone.position[1] - active.position[1]) * block_px)

    def render(self) -> None:
        """Draw every zone and the cursor"""
        self.screen.fill(BLACK)
        for zone in list(self.zone_map.zones.values()):
            origin_x, origin_y = self._zone_origin(zone)
            block = self.store.load_or_create(zone.key)
            pygame.draw.rect(self.screen, TERRAIN_COLORS[TerrainType.NONE],
                             (origin_x, origin_y, BLOCK_SIZE * TILE_SIZE, BLOCK_SIZE * TILE_SIZE))
            for (x, y), terrain_type in block.visible_cells():
                rect = (origin_x + x * TILE_SIZE,
                        origin_y + (BLOCK_SIZE - 1 - y) * TILE_SIZE,
                        TILE_SIZE, TILE_SIZE)
                pygame.draw.rect(self.screen, TERRAIN_COLORS[terrain_type], rect)
            pygame.draw.rect(self.screen, GRID_COLOR,
                             (origin_x, origin_y, BLOCK_SIZE * TILE_SIZE, BLOCK_SIZE * TILE_SIZE), 1)

        origin_x, origin_y = self._zone_origin(self.zone_map.active)
        cursor_rect = (origin_x + self.cursor[0] * TILE_SIZE,
                       origin_y + (BLOCK_SIZE - 1 - self.cursor[1]) * TILE_SIZE,
                       TILE_SIZE, TILE_SIZE)
        pygame.draw.rect(self.screen, CURSOR_COLOR, cursor_rect, 2)
        pygame.display.flip()

    def run(self) -> None:
        """Run the main loop"""
        self.running = True
        self.start()
        pygame.time.set_timer(GENERATE_EVENT, GENERATE_INTERVAL_MS)

        while self.running:
            self.process_input()
            self.render()
            self.clock.tick(FPS)

        pygame.quit()
