from fasthtml.common import *
from monsterui.all import *

from ..entities import GuestBook

rt = APIRouter()

FIELD_CLS = "w-full px-4 py-2 rounded-lg bg-white/10 border border-white/20 text-white placeholder-purple-300 focus:outline-none focus:ring-2 focus:ring-purple-400"


def visitor_badge(view: GuestBook):
    return Div(
        Span(cls="w-2 h-2 bg-green-400 rounded-full animate-pulse"),
        Span(f"{view.visitor_count} visitors",
             data_text=f"{GuestBook.Svisitor_count} + ' visitors'",
             cls="text-purple-200 text-sm"),
        cls="mt-4 inline-flex items-center gap-2 bg-white/10 rounded-full px-4 py-2",
    )


def sign_form(view: GuestBook):
    return Div(
        H2("Sign the Guest Book", cls="text-xl font-semibold text-white mb-4"),
        Form(
            Div(
                Div(Label("Your Name", cls="block text-purple-200 text-sm mb-1"),
                    Input(type="text", name="name", placeholder="Enter your name", required=True,
                          data_bind=GuestBook.Sname, cls=FIELD_CLS)),
                Div(Label("Message", cls="block text-purple-200 text-sm mb-1"),
                    Input(type="text", name="message", placeholder="Leave a message...", required=True,
                          data_bind=GuestBook.Smessage, cls=FIELD_CLS)),
                cls="grid grid-cols-1 md:grid-cols-2 gap-4",
            ),
            Div(
                Button("Sign Guest Book", type="submit",
                       cls="px-6 py-2 bg-purple-600 hover:bg-purple-500 text-white font-medium rounded-lg transition-colors"),
                Button("Clear All", type="button", data_on_click=view.action("clear"),
                       cls="px-4 py-2 bg-white/10 hover:bg-white/20 text-purple-200 rounded-lg transition-colors"),
                cls="flex gap-3",
            ),
            data_on_submit=view.action("submit"),
            cls="space-y-4",
        ),
        cls="bg-white/10 backdrop-blur-lg rounded-2xl p-6 mb-8 border border-white/20",
    )


def guest_book_page(view: GuestBook, port: int):
    return Div(
        view,
        Container(
            Div(
                H1("Guest Book", cls="text-5xl font-bold text-white mb-4"),
                P("A live guest book served by FastHTML and Datastar", cls="text-purple-200 text-lg"),
                visitor_badge(view),
                cls="text-center mb-12",
            ),
            sign_form(view),
            view.entry_list(),
            Div(
                P("This app runs on port ",
                  Span(str(port), cls="font-mono bg-purple-800/50 px-2 py-0.5 rounded"),
                  " and is deployed via GitOps"),
                P("FastHTML • Datastar • Server-Sent Events", cls=TextPresets.muted_sm + " mt-2 font-mono"),
                cls="mt-12 text-center text-purple-300 text-sm",
            ),
            cls="max-w-4xl mx-auto py-12 px-4",
        ),
        data_on_load=view.live_action(),
        cls="min-h-screen bg-gradient-to-br from-indigo-900 via-purple-900 to-pink-800",
    )


@rt('/')
def index(req: Request):
    """Mount a guest book for this page; it stays registered until the live stream takes it over."""
    context = req.app.state.context
    view = GuestBook.from_context(context)
    context.track(view, ttl=context.config.guestbook.view_ttl)
    return Title("Guest Book"), guest_book_page(view, context.config.web.port)
