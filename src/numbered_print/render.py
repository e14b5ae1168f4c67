"""Render loaded images into a print-ready HTML page."""

from html import escape
from pathlib import Path

from numbered_print.probe import LoadedImage, is_url

MARGINS = {"none": "0", "minimum": "5mm", "default": "15mm"}


def image_src(path: str) -> str:
    """Return a URI the browser can load: URLs as is, local paths as file:// URIs."""
    if is_url(path):
        return path
    return Path(path).resolve().as_uri()


def _style(config: dict) -> str:
    settings = config["print_settings"]
    theme = config["theme"]
    orientation = "landscape" if settings["landscape"] else "portrait"
    margin = MARGINS[settings["margin"]]
    color_adjust = "exact" if settings["print_background"] else "economy"
    return f"""\
    <style>
      :root {{
        --primary: {escape(theme["primary_color"])};
        --secondary: {escape(theme["secondary_color"])};
      }}
      body {{
        margin: 0;
        font-family: system-ui, -apple-system, sans-serif;
        background: linear-gradient(135deg, var(--primary) 0%, var(--secondary) 100%);
        print-color-adjust: {color_adjust};
        -webkit-print-color-adjust: {color_adjust};
      }}
      .toolbar {{
        display: flex; gap: 1rem; align-items: center; justify-content: space-between;
        padding: 0.75rem 1.5rem; background: #fff; color: #333;
      }}
      .toolbar button {{
        background: var(--primary); color: #fff; border: 0; border-radius: 20px;
        padding: 0.5rem 1.25rem; cursor: pointer;
      }}
      .images {{ max-width: 1000px; margin: 0 auto; padding: 1.5rem; }}
      .image-item {{
        margin: 0 0 1.5rem; background: #fff; border-radius: 20px; overflow: hidden;
        box-shadow: 0 20px 40px rgba(0, 0, 0, 0.1);
      }}
      .image-item img {{ display: block; width: 100%; height: auto; }}
      .image-info {{ padding: 0.5rem 1rem; font-size: 0.85rem; color: #555; }}
      @page {{ size: A4 {orientation}; margin: {margin}; }}
      @media print {{
        body {{ background: none; }}
        .toolbar, .image-info {{ display: none; }}
        .images {{ max-width: none; padding: 0; }}
        .image-item {{
          margin: 0; border-radius: 0; box-shadow: none;
          page-break-after: always; break-after: page;
        }}
        .image-item:last-child {{ page-break-after: auto; break-after: auto; }}
        .image-item img {{ max-height: 100vh; object-fit: contain; }}
      }}
    </style>"""


def _figure(image: LoadedImage, config: dict) -> str:
    ui = config["ui"]
    loading = ' loading="lazy"' if ui["lazy_loading"] else ""
    caption = ""
    if ui["show_image_info"]:
        info = f"Image {image.index} | {image.width}×{image.height} | {image.size_text}"
        caption = f'\n        <figcaption class="image-info">{escape(info)}</figcaption>'
    return (
        '      <figure class="image-item">\n'
        f'        <img src="{escape(image_src(image.path))}" alt="Image {image.index}"{loading} />'
        f"{caption}\n"
        "      </figure>"
    )


def build_page(
    images: list[LoadedImage],
    config: dict,
    title: str = "Numbered images",
    stats: str | None = None,
    auto_print: bool = False,
) -> str:
    """Build an HTML document showing ``images`` in order, one per printed page."""
    settings = config["print_settings"]
    toolbar_parts = [f"<strong>{escape(title)}</strong>"]
    if config["ui"]["show_stats"]:
        toolbar_parts.append(
            f'<span class="stats">{escape(stats or f"Loaded {len(images)} image(s)")}</span>'
        )
    toolbar_parts.append('<button type="button" onclick="window.print()">Export PDF</button>')
    toolbar = "\n      ".join(toolbar_parts)

    header = ""
    if settings["header"]:
        header = f'\n    <header class="print-header">{escape(settings["header"])}</header>'
    footer = ""
    if settings["footer"]:
        footer = f'\n    <footer class="print-footer">{escape(settings["footer"])}</footer>'

    figures = "\n".join(_figure(image, config) for image in images)
    script = ""
    if auto_print:
        script = (
            "\n    <script>\n"
            '      window.addEventListener("load", () => setTimeout(() => window.print(), 200));\n'
            "    </script>"
        )

    return f"""\
<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{escape(title)}</title>
{_style(config)}
  </head>
  <body>
    <div class="toolbar">
      {toolbar}
    </div>{header}
    <main class="images">
{figures}
    </main>{footer}{script}
  </body>
</html>
"""


def write_page(
    images: list[LoadedImage],
    config: dict,
    out_path: Path,
    title: str = "Numbered images",
    stats: str | None = None,
    auto_print: bool = False,
) -> Path:
    """Write the page to ``out_path`` and return its path."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(
        build_page(images, config, title=title, stats=stats, auto_print=auto_print),
        encoding="utf-8",
    )
    return out_path
