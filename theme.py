"""
Render role assignments into an rmpc theme file (RON).
"""

from roles import ColorRole, RoleAssignment

# Fixed log-level colors, independent of the artwork
WARN_COLOR = "#f0c674"
ERROR_COLOR = "#cc6666"
DEBUG_COLOR = "#b5bd68"
TRACE_COLOR = "#b294bb"

SCROLLBAR_TEMPLATE = """\
    scrollbar: (
        symbols: ["│", "█", "▲", "▼"],
        track_style: (fg: "{bg}", bg: "{bg}"),
        ends_style: (fg: "{bg}", bg: "{bg}"),
        thumb_style: (fg: "{accent}", bg: "{bg}"),
    ),
"""

NO_SCROLLBAR = "    scrollbar: None,\n"

THEME_TEMPLATE = """\
#![enable(implicit_some)]
#![enable(unwrap_newtypes)]
#![enable(unwrap_variant_newtypes)]
(
    default_album_art_path: None,
    show_song_table_header: true,
    draw_borders: true,
    format_tag_separator: " | ",
    browser_column_widths: [20, 38, 42],
    background_color: "{bg}",
    text_color: "{text}",
    header_background_color: "{bg}",
    modal_background_color: "{bg}",
    modal_backdrop: false,
    preview_label_style: (fg: "{accent}", bg: "{bg}"),
    preview_metadata_group_style: (fg: "{accent}", bg: "{bg}", modifiers: "Bold"),
    tab_bar: (
        enabled: true,
        active_style: (fg: "{text}", bg: "{active}", modifiers: "Bold"),
        inactive_style: (fg: "{inactive}", bg: "{bg}"),
    ),
    highlighted_item_style: (fg: "{accent}", bg: "{bg}", modifiers: "Bold"),
    current_item_style: (fg: "{text}", bg: "{active}", modifiers: "Bold"),
    borders_style: (fg: "{border}"),
    highlight_border_style: (fg: "{accent}"),
    symbols: (
        song: "",
        dir: "",
        playlist: "P",
        marker: "M",
        ellipsis: "...",
        song_style: None,
        dir_style: None,
        playlist_style: None,
    ),
    level_styles: (
        info: (fg: "{accent}", bg: "{bg}"),
        warn: (fg: "{warn}", bg: "{bg}"),
        error: (fg: "{error}", bg: "{bg}"),
        debug: (fg: "{debug}", bg: "{bg}"),
        trace: (fg: "{trace}", bg: "{bg}"),
    ),
    progress_bar: (
        symbols: ["[", "=", ">", " ", "]"],
        track_style: (fg: "{inactive}", bg: "{bg}"),
        elapsed_style: (fg: "{active}", bg: "{bg}"),
        thumb_style: (fg: "{active}", bg: "{bg}"),
    ),
{scrollbar}
    song_table_format: [
        (
            prop: (kind: Property(Artist),
                default: (kind: Text("Unknown"))
            ),
            width: "20%",
        ),
        (
            prop: (kind: Property(Title),
                default: (kind: Text("Unknown"))
            ),
            width: "35%",
        ),
        (
            prop: (kind: Property(Album), style: (fg: "{text}", bg: "{bg}"),
                default: (kind: Text("Unknown Album"), style: (fg: "{text}", bg: "{bg}"))
            ),
            width: "30%",
        ),
        (
            prop: (kind: Property(Duration),
                default: (kind: Text("-"))
            ),
            width: "15%",
            alignment: Right,
        ),
    ],
    components: {{}},
    layout: Split(
        direction: Vertical,
        panes: [
            (
                pane: Pane(Header),
                size: "2",
            ),
            (
                pane: Pane(Tabs),
                size: "3",
            ),
            (
                pane: Pane(TabContent),
                size: "100%",
            ),
            (
                pane: Pane(ProgressBar),
                size: "1",
            ),
        ],
    ),
    header: (
        rows: [
            (
                left: [
                    (kind: Text("["), style: (fg: "{accent}", modifiers: "Bold")),
                    (kind: Property(Status(StateV2(playing_label: "Playing", paused_label: "Paused", stopped_label: "Stopped"))), style: (fg: "{accent}", modifiers: "Bold")),
                    (kind: Text("]"), style: (fg: "{accent}", modifiers: "Bold"))
                ],
                center: [
                    (kind: Property(Song(Title)), style: (modifiers: "Bold"),
                        default: (kind: Text("No Song"), style: (modifiers: "Bold"))
                    )
                ],
                right: [
                    (kind: Property(Widget(ScanStatus)), style: (fg: "{accent}")),
                    (kind: Property(Widget(Volume)), style: (fg: "{accent}"))
                ]
            ),
            (
                left: [
                    (kind: Property(Status(Elapsed))),
                    (kind: Text(" / ")),
                    (kind: Property(Status(Duration))),
                    (kind: Text(" (")),
                    (kind: Property(Status(Bitrate))),
                    (kind: Text(" kbps)"))
                ],
                center: [
                    (kind: Property(Song(Artist)), style: (fg: "{accent}", modifiers: "Bold"),
                        default: (kind: Text("Unknown"), style: (fg: "{accent}", modifiers: "Bold"))
                    ),
                    (kind: Text(" - ")),
                    (kind: Property(Song(Album)),
                        default: (kind: Text("Unknown Album"))
                    )
                ],
                right: [
                    (
                        kind: Property(Widget(States(
                            active_style: (fg: "{text}", modifiers: "Bold"),
                            separator_style: (fg: "{text}")))
                        ),
                        style: (fg: "{inactive}")
                    ),
                ]
            ),
        ],
    ),
    browser_song_format: [
        (
            kind: Group([
                (kind: Property(Track)),
                (kind: Text(" ")),
            ])
        ),
        (
            kind: Group([
                (kind: Property(Artist)),
                (kind: Text(" - ")),
                (kind: Property(Title)),
            ]),
            default: (kind: Property(Filename))
        ),
    ],
    lyrics: (
        timestamp: false
    )
)
"""


def role_hexes(assignments: list[RoleAssignment]) -> dict:
    """Map ColorRole -> hex. Later duplicates override earlier ones."""
    return {a.role: a.hex for a in assignments}


def render_theme(assignments: list[RoleAssignment], scrollbar_enabled: bool = True) -> str:
    """
    Fill the theme template from role assignments.

    Raises:
        KeyError: If one of background, text, accent, border, active or
            inactive is missing
    """
    hexes = role_hexes(assignments)
    slots = {
        'bg': hexes[ColorRole.BACKGROUND],
        'text': hexes[ColorRole.TEXT],
        'accent': hexes[ColorRole.ACCENT],
        'border': hexes[ColorRole.BORDER],
        'active': hexes[ColorRole.ACTIVE_ITEM],
        'inactive': hexes[ColorRole.INACTIVE_ITEM],
        'warn': WARN_COLOR,
        'error': ERROR_COLOR,
        'debug': DEBUG_COLOR,
        'trace': TRACE_COLOR,
    }

    if scrollbar_enabled:
        scrollbar = SCROLLBAR_TEMPLATE.format(**slots)
    else:
        scrollbar = NO_SCROLLBAR

    return THEME_TEMPLATE.format(scrollbar=scrollbar, **slots)
