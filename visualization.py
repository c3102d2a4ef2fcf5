# visualization.py
"""
Handles the visualization of the particle swarm using Pygame.

The Visualizer is the rendering, input and control-panel side of the
application: it projects the particle buffers through the camera,
splats them additively with an approximate bloom, feeds mouse motion into
the PointerState, and exposes every tunable in a side panel.
"""
import logging
from typing import Optional, Tuple

import numpy as np
import pygame

from constants import (
    BLOOM_BASE_DOWNSCALE, FULLSCREEN, POINT_SCALE, UI_BACKGROUND_ALPHA,
    UI_PANEL_WIDTH, WINDOW_HEIGHT, WINDOW_WIDTH
)
from interaction import PerspectiveCamera, PointerState
from particle import ParticleSystem
from settings import CONTROLS, ControlSpec
from themes import THEME_NAMES, get_theme

# Forward reference for type hinting to avoid circular import
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from simulation import Simulation


# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self, camera: PerspectiveCamera, fullscreen: bool = FULLSCREEN, show_panel: bool = True):
#     - Side Effects: Initializes Pygame, creates the display and sets the
#       camera aspect ratio to match the simulation area.
#
#   - draw(self, particles: ParticleSystem, simulation: "Simulation", pointer: PointerState) -> bool:
#     - Outputs:
#       - bool: False if the user has quit, True otherwise.
#     - Side Effects: Handles events (updating `pointer` and, through the
#       simulation, the config), renders the particles and the panel,
#       and clears particles.needs_update.

class Visualizer:
    """
    Renders the particle buffers and provides the interactive control panel.
    """
    def __init__(self, camera: PerspectiveCamera, fullscreen: bool = FULLSCREEN, show_panel: bool = True):
        """
        Initializes Pygame and the display window.
        """
        pygame.init()
        pygame.font.init()

        self.panel_width = UI_PANEL_WIDTH if show_panel else 0
        if fullscreen:
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width, height = WINDOW_WIDTH + self.panel_width, WINDOW_HEIGHT
            self.screen = pygame.display.set_mode((width, height))

        # The simulation area is the total width minus the UI panel
        self.sim_width = width - self.panel_width
        self.sim_height = height
        self.sim_surface = pygame.Surface((self.sim_width, self.sim_height))

        self.camera = camera
        self.camera.set_aspect(self.sim_width / self.sim_height)

        self.ui_panel_surface = pygame.Surface((max(self.panel_width, 1), self.sim_height), pygame.SRCALPHA)
        self.ui_panel_surface.fill((40, 40, 40, UI_BACKGROUND_ALPHA))

        pygame.display.set_caption("Particle Swarm")
        self.clock = pygame.time.Clock()

        # Use a cleaner, sans-serif font. Pygame will fall back if 'Segoe UI' is not found.
        try:
            self.font_main = pygame.font.SysFont("Segoe UI", 13)
            self.font_main_bold = pygame.font.SysFont("Segoe UI", 13, bold=True)
        except pygame.error:
            logging.warning("Segoe UI font not found, falling back to default sans-serif.")
            self.font_main = pygame.font.SysFont(None, 16)
            self.font_main_bold = pygame.font.SysFont(None, 16, bold=True)

        # --- Button Configuration ---
        panel_x = self.sim_width + 20
        button_width = self.panel_width - 40
        self.reset_button_rect = pygame.Rect(panel_x, 10, button_width, 28)
        self.theme_button_rect = pygame.Rect(panel_x, self.reset_button_rect.bottom + 5, button_width, 28)
        self.controls_top = self.theme_button_rect.bottom + 12

        self.hovered_control: Optional[ControlSpec] = None

        # --- UI Color Palette ---
        self.button_color = (80, 80, 80)
        self.button_hover_color = (110, 110, 110)
        self.text_color_title = (255, 255, 255)
        self.text_color_key = (200, 200, 200)
        self.text_color_value = (255, 255, 255)
        self.param_box_color = (60, 60, 60, 160)
        self.param_box_hover_color = (90, 90, 60, 200)
        self.param_box_spacing = 3

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    def _handle_events(self, simulation: "Simulation", pointer: PointerState, mouse_pos: Tuple[int, int]) -> bool:
        in_sim_area = mouse_pos[0] < self.sim_width

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    return False
                if event.key == pygame.K_r:
                    simulation.reset()

            if event.type == pygame.MOUSEMOTION and event.pos[0] < self.sim_width:
                pointer.update_from_screen(event.pos[0], event.pos[1], self.sim_width, self.sim_height)

            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if in_sim_area:
                    pointer.pressed = True
                elif self.reset_button_rect.collidepoint(mouse_pos):
                    simulation.reset()
                elif self.theme_button_rect.collidepoint(mouse_pos):
                    self._cycle_theme(simulation)

            if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                pointer.pressed = False

            # Touch positions are normalized to the whole window
            if event.type in (pygame.FINGERMOTION, pygame.FINGERDOWN):
                sim_fraction = self.sim_width / self.screen.get_width()
                if event.x < sim_fraction:
                    pointer.update_from_touch(event.x, event.y, sim_fraction)
                    if event.type == pygame.FINGERDOWN:
                        pointer.pressed = True

            if event.type == pygame.FINGERUP:
                pointer.pressed = False

            if event.type == pygame.MOUSEWHEEL and self.hovered_control:
                spec = self.hovered_control
                old_value = getattr(simulation.config, spec.name)
                # event.y is 1 for scroll up, -1 for scroll down
                simulation.update_parameter(spec.name, old_value + event.y * spec.step)
        return True

    def _cycle_theme(self, simulation: "Simulation") -> None:
        current = THEME_NAMES.index(simulation.config.color_theme)
        simulation.update_parameter("color_theme", THEME_NAMES[(current + 1) % len(THEME_NAMES)])

    def _render_particles(self, particles: ParticleSystem, simulation: "Simulation") -> None:
        """Splats every visible particle additively, then adds bloom."""
        config = simulation.config
        background = np.array(get_theme(config.color_theme).background_rgb, dtype=np.float32) / 255.0
        frame = np.empty((self.sim_width, self.sim_height, 3), dtype=np.float32)
        frame[:] = background

        ndc, depth = self.camera.project(particles.positions)
        visible = (
            (depth > self.camera.near)
            & (np.abs(ndc[:, 0]) < 1.0)
            & (np.abs(ndc[:, 1]) < 1.0)
        )
        px = ((ndc[visible, 0] + 1.0) * 0.5 * self.sim_width).astype(np.int32)
        py = ((1.0 - ndc[visible, 1]) * 0.5 * self.sim_height).astype(np.int32)
        np.clip(px, 0, self.sim_width - 1, out=px)
        np.clip(py, 0, self.sim_height - 1, out=py)

        # Energy of a soft point sprite grows with its on-screen diameter.
        diameter = particles.sizes[visible] * POINT_SCALE / depth[visible]
        weight = np.clip(diameter, 0.25, 4.0) * 0.35
        splat = (particles.colors[visible] * weight[:, np.newaxis]).astype(np.float32)
        np.add.at(frame, (px, py), splat)

        bright = np.clip(frame - config.bloom_threshold, 0.0, 1.0) * config.bloom_strength
        np.clip(frame, 0.0, 1.0, out=frame)
        pygame.surfarray.blit_array(self.sim_surface, (frame * 255).astype(np.uint8))

        if config.bloom_strength > 0 and bright.any():
            downscale = max(2, int(BLOOM_BASE_DOWNSCALE * max(config.bloom_radius, 0.1)))
            bloom_surface = pygame.surfarray.make_surface((np.clip(bright, 0.0, 1.0) * 255).astype(np.uint8))
            small = pygame.transform.smoothscale(
                bloom_surface,
                (max(1, self.sim_width // downscale), max(1, self.sim_height // downscale))
            )
            glow = pygame.transform.smoothscale(small, (self.sim_width, self.sim_height))
            self.sim_surface.blit(glow, (0, 0), special_flags=pygame.BLEND_ADD)

        particles.needs_update = False

    def _draw_button(self, rect: pygame.Rect, label: str, mouse_pos: Tuple[int, int]) -> None:
        """Draws a button and handles its hover state."""
        color = self.button_hover_color if rect.collidepoint(mouse_pos) else self.button_color
        pygame.draw.rect(self.screen, color, rect, border_radius=5)
        text_surf = self.font_main.render(label, True, self.text_color_title)
        self.screen.blit(text_surf, text_surf.get_rect(center=rect.center))

    def _format_value(self, spec: ControlSpec, value) -> str:
        if isinstance(spec.step, int):
            return str(value)
        return f"{value:.4f}" if spec.step < 0.01 else f"{value:.2f}"

    def _draw_controls(self, simulation: "Simulation", mouse_pos: Tuple[int, int]) -> None:
        """Renders every tunable in its own box; scroll over a box to change it."""
        box_v_padding = 4
        key_value_gap = 12
        line_height = self.font_main.get_linesize()

        panel_x = self.reset_button_rect.x
        panel_width = self.reset_button_rect.width
        key_max_width = (panel_width - key_value_gap) * 0.6 - box_v_padding
        value_max_width = panel_width - key_max_width - key_value_gap - 2 * box_v_padding
        key_column_right_x = panel_x + box_v_padding + key_max_width
        value_column_left_x = key_column_right_x + key_value_gap

        self.hovered_control = None
        current_y = self.controls_top

        for spec in CONTROLS:
            value_text = self._format_value(spec, getattr(simulation.config, spec.name))
            key_surfs = self._render_text_wrapped(spec.label, self.font_main_bold, key_max_width, self.text_color_key)
            value_surfs = self._render_text_wrapped(value_text, self.font_main, value_max_width, self.text_color_value)

            num_lines = max(len(key_surfs), len(value_surfs))
            box_height = num_lines * line_height + box_v_padding * 2
            box_rect = pygame.Rect(panel_x, current_y, panel_width, box_height)

            hovered = box_rect.collidepoint(mouse_pos)
            if hovered:
                self.hovered_control = spec
            box_color = self.param_box_hover_color if hovered else self.param_box_color
            pygame.draw.rect(self.screen, box_color, box_rect, border_radius=6)

            line_y = current_y + box_v_padding
            for surf in key_surfs:
                self.screen.blit(surf, surf.get_rect(topright=(key_column_right_x, line_y)))
                line_y += line_height

            line_y = current_y + box_v_padding
            for surf in value_surfs:
                self.screen.blit(surf, surf.get_rect(topleft=(value_column_left_x, line_y)))
                line_y += line_height

            current_y += box_height + self.param_box_spacing

        fps_surf = self.font_main.render(f"{self.clock.get_fps():.0f} FPS", True, self.text_color_key)
        self.screen.blit(fps_surf, (panel_x, current_y + 6))

    def _render_text_wrapped(
        self, text: str, font: pygame.font.Font, max_width: float, color: tuple
    ) -> list:
        """
        Renders text, wrapping it to a new line if it exceeds max_width.
        Returns a list of rendered surfaces, one for each line.
        """
        lines = []
        current_line = ""
        for word in text.split(' '):
            test_line = f"{current_line} {word}".strip()
            if font.size(test_line)[0] <= max_width or not current_line:
                current_line = test_line
            else:
                lines.append(current_line)
                current_line = word
        lines.append(current_line)
        return [font.render(line, True, color) for line in lines if line]

    def draw(self, particles: ParticleSystem, simulation: "Simulation", pointer: PointerState) -> bool:
        """
        Handles events, then draws the particles and the control panel.

        Returns:
            bool: False if the application should exit, True otherwise.
        """
        mouse_pos = pygame.mouse.get_pos()
        if not self._handle_events(simulation, pointer, mouse_pos):
            return False

        self._render_particles(particles, simulation)
        self.screen.blit(self.sim_surface, (0, 0))

        if self.panel_width:
            self.screen.blit(self.ui_panel_surface, (self.sim_width, 0))
            self._draw_button(self.reset_button_rect, "Reset Particles", mouse_pos)
            self._draw_button(
                self.theme_button_rect, f"Theme: {simulation.config.color_theme}", mouse_pos
            )
            self._draw_controls(simulation, mouse_pos)

        pygame.display.flip()
        return True

    def tick(self, fps: int) -> float:
        """Limits the frame rate; returns milliseconds since the last call."""
        return self.clock.tick(fps)

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
