"""
Motion presets — classroom scenarios.
Each preset returns the keyword arguments for a driver's start(), and can
optionally run the scenario headless to completion.
"""

from controller import FreeFallController, UniformMotionController


class MotionPreset:
    """Each preset: inputs dict → (optionally) headless trace → result dict."""

    @staticmethod
    def drop_50m(run=False) -> dict:
        """Drop from 50 m at rest: lands after ~3.19 s at ~31.3 m/s."""
        inputs = {"height": "50", "velocity": "0", "variant": "ball"}
        return _free_fall("drop_50m", inputs, run)

    @staticmethod
    def upward_throw(run=False) -> dict:
        """Thrown up at 10 m/s from 20 m: rises first, then falls past the start."""
        inputs = {"height": "20", "velocity": "-10", "variant": "ball"}
        return _free_fall("upward_throw", inputs, run)

    @staticmethod
    def parachute_jump(run=False) -> dict:
        """Released downward at 5 m/s from 120 m."""
        inputs = {"height": "120", "velocity": "5", "variant": "parachute"}
        return _free_fall("parachute_jump", inputs, run)

    @staticmethod
    def ground_release(run=False) -> dict:
        """Released at ground level: the run ends on the first tick."""
        inputs = {"height": "0", "velocity": "0", "variant": "ball"}
        return _free_fall("ground_release", inputs, run)

    @staticmethod
    def car_cruise(run=False) -> dict:
        """Car from 0 m at 5 m/s for 5 s: ends at 25 m."""
        inputs = {"start": "0", "velocity": "5", "target": "", "duration": "5"}
        return _uniform("car_cruise", inputs, run)

    @staticmethod
    def car_reverse(run=False) -> dict:
        """Car backing up from 40 m at −4 m/s for 6 s."""
        inputs = {"start": "40", "velocity": "-4", "target": "", "duration": "6"}
        return _uniform("car_reverse", inputs, run)

    @staticmethod
    def car_to_target(run=False) -> dict:
        """Speed derived from the target: 10 m → 70 m in 4 s (15 m/s)."""
        inputs = {"start": "10", "velocity": "", "target": "70", "duration": "4"}
        return _uniform("car_to_target", inputs, run)


PRESETS = {
    "drop_50m":       MotionPreset.drop_50m,
    "upward_throw":   MotionPreset.upward_throw,
    "parachute_jump": MotionPreset.parachute_jump,
    "ground_release": MotionPreset.ground_release,
    "car_cruise":     MotionPreset.car_cruise,
    "car_reverse":    MotionPreset.car_reverse,
    "car_to_target":  MotionPreset.car_to_target,
}


def _free_fall(name: str, inputs: dict, run: bool) -> dict:
    result = {"name": name, "motion": FreeFallController.MOTION, "inputs": inputs, "trace": None}
    if run:
        result["trace"] = FreeFallController.simulate(**inputs)
    return result


def _uniform(name: str, inputs: dict, run: bool) -> dict:
    result = {"name": name, "motion": UniformMotionController.MOTION, "inputs": inputs, "trace": None}
    if run:
        result["trace"] = UniformMotionController.simulate(**inputs)
    return result
