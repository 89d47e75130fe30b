"""
Generative Sketch Parameter Presets

QUALITY_DEFAULTS holds each engine's option set for the two quality
modes (preview thumbnails vs. the full-size canvas). Named presets pick
an engine and layer option overrides on top. The "engine" field
determines which sketch engine to instantiate (resonance, attractor,
topology).
"""

QUALITY_DEFAULTS = {
    # =====================================================================
    # SPRING-WAVE GRID
    # =====================================================================
    "resonance": {
        "preview": {
            "cols": 25, "rows": 25,
            "spring_strength": 0.025,
            "damping": 0.94,
            "coupling": 0.002,
            "wave_speed": 0.15,
            "wave_decay": 0.985,
            "wave_amplitude": 20.0,
            "wave_frequency": 0.05,
            "wave_falloff": 0.003,
            "wave_gain": 0.01,
            "max_wave_sources": 3,
            "trigger_threshold": 0.02,
            "ambient_interval": 90,
            "ambient_strength": 0.4,
            "seed_sources": True,
            "repulsion_radius": 120.0,
            "repulsion_softening": 200.0,
            "connection_alpha": 20.0,
            "diagonals": True,
            "seed": 0,
        },
        "full": {
            "cols": 50, "rows": 50,
            "spring_strength": 0.025,
            "damping": 0.94,
            "coupling": 0.002,
            "wave_speed": 0.1,
            "wave_decay": 0.985,
            "wave_amplitude": 20.0,
            "wave_frequency": 0.05,
            "wave_falloff": 0.003,
            "wave_gain": 0.01,
            "max_wave_sources": 6,
            "trigger_threshold": 0.02,
            "ambient_interval": 90,
            "ambient_strength": 0.4,
            "seed_sources": True,
            "repulsion_radius": 120.0,
            "repulsion_softening": 200.0,
            "connection_alpha": 12.0,
            "diagonals": True,
            "seed": 0,
        },
    },
    # =====================================================================
    # STRANGE ATTRACTOR
    # =====================================================================
    "attractor": {
        "preview": {
            "system": "lorenz",
            "trail_count": 3,
            "max_trail_length": 300,
            "steps_per_frame": 3,
            "dt": 0.005,
            "render_scale": 6.0,
            "fov": 300.0,
            "z_scale": 0.5,
            "smoothing": 0.05,
            "seed_spacing": 0.5,
            "fade": 0.08,
        },
        "full": {
            "system": "lorenz",
            "trail_count": 8,
            "max_trail_length": 800,
            "steps_per_frame": 5,
            "dt": 0.005,
            "render_scale": 8.0,
            "fov": 300.0,
            "z_scale": 0.5,
            "smoothing": 0.05,
            "seed_spacing": 0.5,
            "fade": 0.04,
        },
    },
    # =====================================================================
    # CONTOUR FIELD
    # =====================================================================
    "topology": {
        "preview": {
            "resolution": 8,
            "contour_levels": 12,
            "noise_scale": 0.008,
            "time_speed": 0.008,
            "octaves": 3,
            "pointer_amplitude": 0.4,
            "pointer_spread": 40000.0,
            "seed": 0,
            "major_line_interval": 4,
            "line_alpha": 0.25,
        },
        "full": {
            "resolution": 5,
            "contour_levels": 20,
            "noise_scale": 0.008,
            "time_speed": 0.004,
            "octaves": 3,
            "pointer_amplitude": 0.4,
            "pointer_spread": 40000.0,
            "seed": 0,
            "major_line_interval": 4,
            "line_alpha": 0.18,
        },
    },
}


PRESETS = {
    "resonance": {
        "engine": "resonance",
        "name": "Resonance",
        "description": "Spring mesh rippling under interfering wave sources",
        "options": {},
    },
    "ripples": {
        "engine": "resonance",
        "name": "Ripples",
        "description": "Looser springs and slower decay, long-lived ripples",
        "options": {"spring_strength": 0.015, "damping": 0.96, "wave_decay": 0.992},
    },
    "lorenz": {
        "engine": "attractor",
        "name": "Lorenz",
        "description": "Lorenz butterfly traced by several RK4 trails",
        "options": {"system": "lorenz"},
    },
    "rossler": {
        "engine": "attractor",
        "name": "Rossler",
        "description": "Rossler spiral band, wider sub-steps",
        "options": {"system": "rossler", "dt": 0.02, "render_scale": 14.0},
    },
    "topology": {
        "engine": "topology",
        "name": "Topology",
        "description": "Morphing iso-contours over drifting value noise",
        "options": {},
    },
    "highlands": {
        "engine": "topology",
        "name": "Highlands",
        "description": "Coarser noise, fewer and bolder contour lines",
        "options": {"noise_scale": 0.005, "contour_levels": 10, "major_line_interval": 2},
    },
}

PRESET_ORDER = ["resonance", "ripples", "lorenz", "rossler", "topology", "highlands"]

ENGINE_ORDER = ["resonance", "attractor", "topology"]


def quality_defaults(engine_name, quality):
    """Copy of the option defaults for an engine in a quality mode."""
    q = getattr(quality, "value", quality)
    return dict(QUALITY_DEFAULTS[engine_name][q])


def get_preset(name):
    """Get a preset by name. Returns None if not found."""
    return PRESETS.get(name)


def list_presets(engine=None):
    """Return list of (key, name, description) for presets.
    If engine is specified, filter to that engine only."""
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"])
            for k in PRESET_ORDER
            if engine is None or PRESETS[k]["engine"] == engine]

