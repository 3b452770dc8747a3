import argparse
import json
import logging

from .buffer import PixelBuffer
from .config import ProcessingParams, default_params
from .shapes import cmyk_to_rgb, hex_to_rgb, rgb_to_cmyk, rgb_to_hex
from .utils import read_image_any_path, round_half_up, save_image_any_path
from . import color_analysis, filters, histogram, morphology, point_ops, rasterizer, threshold


def _load(args: argparse.Namespace):
    img = read_image_any_path(args.input)
    if img is None:
        print(f"Failed to read: {args.input}")
    return img


def _save(args: argparse.Namespace, out: PixelBuffer) -> int:
    if not save_image_any_path(args.output, out):
        print(f"Failed to save: {args.output}")
        return 3
    print(f"Saved: {args.output}")
    return 0


def cmd_filter(args: argparse.Namespace) -> int:
    img = _load(args)
    if img is None:
        return 2
    kind = args.kind
    if kind == "smoothing":
        out = filters.smoothing(img, args.size or default_params.smoothing_size)
    elif kind == "median":
        out = filters.median(img, args.size or default_params.median_size)
    elif kind == "gaussian":
        out = filters.gaussian_blur(img, args.radius, args.sigma)
    elif kind == "sobel":
        out = filters.sobel(img, args.threshold, args.direction)
    elif kind == "highpass":
        out = filters.highpass_sharpen(img, args.strength)
    else:
        if args.preset:
            out = filters.preset(img, args.preset, args.offset)
        else:
            kernel = json.loads(args.kernel) if args.kernel else default_params.custom_kernel
            out = filters.custom(img, kernel, args.divisor, args.offset)
    return _save(args, out)


def cmd_threshold(args: argparse.Namespace) -> int:
    img = _load(args)
    if img is None:
        return 2
    params = ProcessingParams(manual_threshold=args.value, percent_black=args.percent)
    t = threshold.ThresholdMethod(args.method).compute(histogram.compute_histogram(img), params)
    print(f"Threshold ({args.method}): {t}")
    if not args.output:
        return 0
    return _save(args, threshold.binarize(img, t))


def cmd_morph(args: argparse.Namespace) -> int:
    img = _load(args)
    if img is None:
        return 2
    binary = morphology.to_binary(img, args.binary_threshold)
    if args.op == "hitormiss":
        out = morphology.hit_or_miss(binary)
    else:
        se = morphology.structuring_element(args.se_size, args.se_shape)
        if args.op == "dilation":
            out = morphology.dilate(binary, se, args.iterations)
        elif args.op == "erosion":
            out = morphology.erode(binary, se, args.iterations)
        elif args.op == "opening":
            out = morphology.opening(binary, se)
        else:
            out = morphology.closing(binary, se)
    return _save(args, out)


def cmd_histogram(args: argparse.Namespace) -> int:
    img = _load(args)
    if img is None:
        return 2
    if args.op == "stats":
        stats = histogram.channel_statistics(histogram.compute_histogram(img))
        for name, s in stats.items():
            print(f"{name:>5}: min={s.minimum} max={s.maximum} mean={s.mean:.2f} peak={s.peak} ({s.peak_count})")
        return 0
    if not args.output:
        print("--output is required for stretch/equalize")
        return 2
    out = histogram.stretch(img) if args.op == "stretch" else histogram.equalize(img)
    return _save(args, out)


def cmd_point(args: argparse.Namespace) -> int:
    img = _load(args)
    if img is None:
        return 2
    values = args.values if len(args.values) > 1 else args.values[0]
    if args.op == "grayscale":
        out = point_ops.grayscale(img, args.method)
    elif args.op == "brightness":
        out = point_ops.brightness(img, args.values[0])
    else:
        out = getattr(point_ops, args.op)(img, values)
    return _save(args, out)


def cmd_draw(args: argparse.Namespace) -> int:
    if args.input:
        img = _load(args)
        if img is None:
            return 2
    else:
        img = PixelBuffer(args.width, args.height)
        img.data[...] = 255
    color = tuple(args.color)
    c = args.coords
    if args.shape != "circle":
        c = [round_half_up(v) for v in c]
    if args.shape == "line":
        rasterizer.draw_line(img, c[0], c[1], c[2], c[3], color, args.line_width)
    elif args.shape == "rectangle":
        rasterizer.draw_rectangle(img, c[0], c[1], c[2], c[3], color, args.line_width)
    else:
        rasterizer.draw_circle_outline(img, c[0], c[1], c[2], color, args.line_width)
    return _save(args, img)


def cmd_analyze(args: argparse.Namespace) -> int:
    img = _load(args)
    if img is None:
        return 2
    params = ProcessingParams(color_tolerance=args.tolerance, match_in_hsv=args.hsv)
    if args.target:
        params.target_color = tuple(args.target)
    result = color_analysis.AnalysisMethod(args.method).analyze(img, params)
    print(f"{result.method}: {result.matched}/{result.total} pixels ({result.percentage:.2f}%)")
    if not args.output:
        return 0
    return _save(args, color_analysis.overlay(img, result.mask))


def cmd_color(args: argparse.Namespace) -> int:
    if args.rgb:
        rgb = tuple(args.rgb)
    elif args.cmyk:
        rgb = cmyk_to_rgb(*args.cmyk)
    else:
        rgb = hex_to_rgb(args.hex)
    print(f"RGB:  {rgb[0]} {rgb[1]} {rgb[2]}")
    print(f"HEX:  {rgb_to_hex(*rgb)}")
    print("CMYK: {} {} {} {}".format(*rgb_to_cmyk(*rgb)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="raster-lab", description="Headless CLI for raster-lab")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)
    d = default_params

    sp = sub.add_parser("filter", help="Convolution and median filters")
    sp.add_argument("kind", choices=["smoothing", "gaussian", "median", "sobel", "highpass", "custom"])
    sp.add_argument("--input", required=True, help="Input image path")
    sp.add_argument("--output", required=True, help="Output image path")
    sp.add_argument("--size", type=int, help="Window size (smoothing and median defaults differ)")
    sp.add_argument("--radius", type=float, default=d.gaussian_radius)
    sp.add_argument("--sigma", type=float, default=d.gaussian_sigma)
    sp.add_argument("--threshold", type=float, default=d.sobel_threshold, help="Sobel edge threshold")
    sp.add_argument("--direction", default=d.sobel_direction, choices=["horizontal", "vertical", "both"])
    sp.add_argument("--strength", type=float, default=d.highpass_strength)
    sp.add_argument("--kernel", help="Custom kernel as JSON list of rows")
    sp.add_argument("--preset", choices=sorted(filters.PRESET_KERNELS))
    sp.add_argument("--divisor", type=float, default=d.custom_divisor)
    sp.add_argument("--offset", type=float, default=d.custom_offset)
    sp.set_defaults(func=cmd_filter)

    sp = sub.add_parser("threshold", help="Select a threshold and binarize")
    sp.add_argument("--input", required=True)
    sp.add_argument("--output")
    sp.add_argument("--method", default="manual", choices=[m.value for m in threshold.ThresholdMethod])
    sp.add_argument("--value", type=int, default=d.manual_threshold, help="Manual threshold")
    sp.add_argument("--percent", type=float, default=d.percent_black, help="Percent black")
    sp.set_defaults(func=cmd_threshold)

    sp = sub.add_parser("morph", help="Binary morphology")
    sp.add_argument("op", choices=["dilation", "erosion", "opening", "closing", "hitormiss"])
    sp.add_argument("--input", required=True)
    sp.add_argument("--output", required=True)
    sp.add_argument("--binary-threshold", type=int, default=d.binary_threshold)
    sp.add_argument("--se-size", type=int, default=d.se_size)
    sp.add_argument("--se-shape", default=d.se_shape, choices=list(morphology.SHAPES))
    sp.add_argument("--iterations", type=int, default=1)
    sp.set_defaults(func=cmd_morph)

    sp = sub.add_parser("histogram", help="Histogram statistics, stretching, equalization")
    sp.add_argument("op", choices=["stats", "stretch", "equalize"])
    sp.add_argument("--input", required=True)
    sp.add_argument("--output")
    sp.set_defaults(func=cmd_histogram)

    sp = sub.add_parser("point", help="Per-pixel arithmetic")
    sp.add_argument("op", choices=["add", "subtract", "multiply", "divide", "brightness", "grayscale"])
    sp.add_argument("--input", required=True)
    sp.add_argument("--output", required=True)
    sp.add_argument("--values", type=float, nargs="+", default=[0.0], help="One value or R G B")
    sp.add_argument("--method", default="luminance", choices=list(point_ops.GRAYSCALE_METHODS))
    sp.set_defaults(func=cmd_point)

    sp = sub.add_parser("draw", help="Rasterize a primitive")
    sp.add_argument("shape", choices=["line", "rectangle", "circle"])
    sp.add_argument("--coords", type=float, nargs="+", required=True,
                    help="line: x0 y0 x1 y1; rectangle: x y w h; circle: cx cy r")
    sp.add_argument("--input", help="Draw onto this image instead of a blank canvas")
    sp.add_argument("--output", required=True)
    sp.add_argument("--width", type=int, default=256)
    sp.add_argument("--height", type=int, default=256)
    sp.add_argument("--color", type=int, nargs=4, default=[0, 0, 0, 255], metavar=("R", "G", "B", "A"))
    sp.add_argument("--line-width", type=int, default=1)
    sp.set_defaults(func=cmd_draw)

    sp = sub.add_parser("analyze", help="Color area detection")
    sp.add_argument("method", choices=[m.value for m in color_analysis.AnalysisMethod])
    sp.add_argument("--input", required=True)
    sp.add_argument("--output", help="Write a highlight overlay of the matched area")
    sp.add_argument("--target", type=int, nargs=3, metavar=("R", "G", "B"), help="custom: target color")
    sp.add_argument("--tolerance", type=float, default=d.color_tolerance)
    sp.add_argument("--hsv", action="store_true", help="custom: compare in HSV")
    sp.set_defaults(func=cmd_analyze)

    sp = sub.add_parser("color", help="Convert a color between RGB, hex and CMYK")
    g = sp.add_mutually_exclusive_group(required=True)
    g.add_argument("--rgb", type=int, nargs=3, metavar=("R", "G", "B"))
    g.add_argument("--cmyk", type=float, nargs=4, metavar=("C", "M", "Y", "K"))
    g.add_argument("--hex")
    sp.set_defaults(func=cmd_color)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)-22s - %(levelname)-8s - %(message)s",
        datefmt="%H:%M:%S",
    )
    if args.cmd == "point" and args.op != "grayscale" and len(args.values) not in (1, 3):
        parser.error("--values takes one value or an R G B triple")
    if args.cmd == "draw" and len(args.coords) < (3 if args.shape == "circle" else 4):
        parser.error(f"{args.shape} needs more --coords")
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
