"""
SVG路径解析 - 将单一SVG path 数据转换为绝对坐标的绘图指令

支持 M/L/H/V/C/S/Q/T/A/Z（含相对形式与紧凑写法的圆弧标志位）。
输出只含 move/line/curve/close 四种指令，圆弧与二次曲线均转换为三次贝塞尔。

测试要点：
- test_parse_relative_commands: 相对指令转绝对坐标
- test_parse_compact_arc_flags: "a7 7 0 100 14" 形式的标志位
- test_builtin_pictograms_parse: 内置图形全部可解析
"""

from __future__ import annotations

import math
import re

COMMANDS = set("MmLlHhVvCcSsQqTtAaZz")
NUMBER_RE = re.compile(r"[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?")

# 指令: ("M", x, y) / ("L", x, y) / ("C", x1, y1, x2, y2, x, y) / ("Z",)
PathOp = tuple


class _Scanner:
    """路径数据扫描器"""

    def __init__(self, data: str):
        self.data = data
        self.pos = 0

    def _skip(self) -> None:
        while self.pos < len(self.data) and self.data[self.pos] in " \t\r\n,":
            self.pos += 1

    def at_end(self) -> bool:
        self._skip()
        return self.pos >= len(self.data)

    def peek_command(self) -> str | None:
        self._skip()
        if self.pos < len(self.data) and self.data[self.pos] in COMMANDS:
            return self.data[self.pos]
        return None

    def read_command(self) -> str:
        cmd = self.peek_command()
        if cmd is None:
            raise ValueError(f"路径指令缺失: 位置{self.pos}")
        self.pos += 1
        return cmd

    def read_number(self) -> float:
        self._skip()
        m = NUMBER_RE.match(self.data, self.pos)
        if not m:
            raise ValueError(f"路径数值无效: 位置{self.pos}")
        self.pos = m.end()
        return float(m.group())

    def read_flag(self) -> bool:
        self._skip()
        ch = self.data[self.pos:self.pos + 1]
        if ch not in ("0", "1"):
            raise ValueError(f"圆弧标志位无效: 位置{self.pos}")
        self.pos += 1
        return ch == "1"


def parse_svg_path(data: str) -> list[PathOp]:
    """解析SVG路径为绝对坐标指令列表"""
    scanner = _Scanner(data)
    ops: list[PathOp] = []
    x = y = 0.0
    start_x = start_y = 0.0
    last_ctrl: tuple[float, float] | None = None
    last_quad: tuple[float, float] | None = None
    prev_cmd = ""

    while not scanner.at_end():
        cmd = scanner.peek_command()
        if cmd is None:
            # 隐式重复上一指令（M之后的隐式指令为L）
            if not prev_cmd or prev_cmd in "Zz":
                raise ValueError(f"路径数据无效: {data[:30]}...")
            cmd = {"M": "L", "m": "l"}.get(prev_cmd, prev_cmd)
        else:
            scanner.read_command()

        rel = cmd.islower()
        upper = cmd.upper()
        ox, oy = (x, y) if rel else (0.0, 0.0)

        if upper == "M":
            x, y = ox + scanner.read_number(), oy + scanner.read_number()
            start_x, start_y = x, y
            ops.append(("M", x, y))
        elif upper == "L":
            x, y = ox + scanner.read_number(), oy + scanner.read_number()
            ops.append(("L", x, y))
        elif upper == "H":
            x = (x if rel else 0.0) + scanner.read_number()
            ops.append(("L", x, y))
        elif upper == "V":
            y = (y if rel else 0.0) + scanner.read_number()
            ops.append(("L", x, y))
        elif upper == "C":
            x1, y1 = ox + scanner.read_number(), oy + scanner.read_number()
            x2, y2 = ox + scanner.read_number(), oy + scanner.read_number()
            x, y = ox + scanner.read_number(), oy + scanner.read_number()
            ops.append(("C", x1, y1, x2, y2, x, y))
            last_ctrl = (x2, y2)
        elif upper == "S":
            if last_ctrl is not None and prev_cmd.upper() in ("C", "S"):
                x1, y1 = 2 * x - last_ctrl[0], 2 * y - last_ctrl[1]
            else:
                x1, y1 = x, y
            x2, y2 = ox + scanner.read_number(), oy + scanner.read_number()
            x, y = ox + scanner.read_number(), oy + scanner.read_number()
            ops.append(("C", x1, y1, x2, y2, x, y))
            last_ctrl = (x2, y2)
        elif upper in ("Q", "T"):
            if upper == "Q":
                qx, qy = ox + scanner.read_number(), oy + scanner.read_number()
            elif last_quad is not None and prev_cmd.upper() in ("Q", "T"):
                qx, qy = 2 * x - last_quad[0], 2 * y - last_quad[1]
            else:
                qx, qy = x, y
            ex, ey = ox + scanner.read_number(), oy + scanner.read_number()
            ops.append((
                "C",
                x + 2 / 3 * (qx - x), y + 2 / 3 * (qy - y),
                ex + 2 / 3 * (qx - ex), ey + 2 / 3 * (qy - ey),
                ex, ey,
            ))
            x, y = ex, ey
            last_quad = (qx, qy)
        elif upper == "A":
            rx, ry = abs(scanner.read_number()), abs(scanner.read_number())
            angle = scanner.read_number()
            large_arc = scanner.read_flag()
            sweep = scanner.read_flag()
            ex, ey = ox + scanner.read_number(), oy + scanner.read_number()
            ops.extend(arc_to_curves(x, y, rx, ry, angle, large_arc, sweep, ex, ey))
            x, y = ex, ey
        elif upper == "Z":
            ops.append(("Z",))
            x, y = start_x, start_y

        if upper not in ("C", "S"):
            last_ctrl = None
        if upper not in ("Q", "T"):
            last_quad = None
        prev_cmd = cmd

    return ops


def arc_to_curves(
    x1: float,
    y1: float,
    rx: float,
    ry: float,
    angle_deg: float,
    large_arc: bool,
    sweep: bool,
    x2: float,
    y2: float,
) -> list[PathOp]:
    """椭圆弧（端点参数化）→ 三次贝塞尔序列"""
    if rx == 0 or ry == 0 or (x1 == x2 and y1 == y2):
        return [("L", x2, y2)]

    phi = math.radians(angle_deg)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)

    dx, dy = (x1 - x2) / 2, (y1 - y2) / 2
    x1p = cos_phi * dx + sin_phi * dy
    y1p = -sin_phi * dx + cos_phi * dy

    # 半径不足时按比例放大
    lam = (x1p ** 2) / (rx ** 2) + (y1p ** 2) / (ry ** 2)
    if lam > 1:
        scale = math.sqrt(lam)
        rx, ry = rx * scale, ry * scale

    num = rx ** 2 * ry ** 2 - rx ** 2 * y1p ** 2 - ry ** 2 * x1p ** 2
    den = rx ** 2 * y1p ** 2 + ry ** 2 * x1p ** 2
    coef = math.sqrt(max(0.0, num / den)) if den else 0.0
    if large_arc == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx

    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2

    def _angle(ux: float, uy: float, vx: float, vy: float) -> float:
        return math.atan2(ux * vy - uy * vx, ux * vx + uy * vy)

    theta1 = _angle(1, 0, (x1p - cxp) / rx, (y1p - cyp) / ry)
    delta = _angle((x1p - cxp) / rx, (y1p - cyp) / ry, (-x1p - cxp) / rx, (-y1p - cyp) / ry)
    if not sweep and delta > 0:
        delta -= 2 * math.pi
    elif sweep and delta < 0:
        delta += 2 * math.pi

    segments = max(1, int(math.ceil(abs(delta) / (math.pi / 2))))
    step = delta / segments
    k = 4 / 3 * math.tan(step / 4)

    def _point(t: float) -> tuple[float, float]:
        ex, ey = rx * math.cos(t), ry * math.sin(t)
        return cx + cos_phi * ex - sin_phi * ey, cy + sin_phi * ex + cos_phi * ey

    def _deriv(t: float) -> tuple[float, float]:
        ex, ey = -rx * math.sin(t), ry * math.cos(t)
        return cos_phi * ex - sin_phi * ey, sin_phi * ex + cos_phi * ey

    ops: list[PathOp] = []
    t = theta1
    for _ in range(segments):
        p0, d0 = _point(t), _deriv(t)
        p3, d3 = _point(t + step), _deriv(t + step)
        ops.append((
            "C",
            p0[0] + k * d0[0], p0[1] + k * d0[1],
            p3[0] - k * d3[0], p3[1] - k * d3[1],
            p3[0], p3[1],
        ))
        t += step

    # 末点对齐到精确终点
    last = ops[-1]
    ops[-1] = last[:5] + (x2, y2)
    return ops


def parse_view_box(view_box: str) -> tuple[float, float, float, float]:
    """解析 viewBox 为 (min_x, min_y, width, height)"""
    parts = [float(v) for v in view_box.replace(",", " ").split()]
    if len(parts) != 4 or parts[2] <= 0 or parts[3] <= 0:
        raise ValueError(f"viewBox 无效: {view_box}")
    return parts[0], parts[1], parts[2], parts[3]
