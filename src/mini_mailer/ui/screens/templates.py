# =============================================================================
# Templates Screen
# =============================================================================
# Manage saved message skeletons.
#
# Features:
#   - List of saved templates
#   - Name/description fields, header and body editors
#   - New, Save, Delete
#   - Copy (to clipboard) and Use (straight into the compose editor)
# =============================================================================

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, OptionList, Static, TextArea

from mini_mailer.storage import Template, TemplateError


class TemplatesScreen(Screen):
    """
    Screen for creating, editing and deleting templates.

    The template store lives on the app (self.app.templates) so the
    compose screen and this screen share it.
    """

    BINDINGS = [
        Binding("ctrl+s", "save_template", "Save"),
        Binding("ctrl+n", "new_template", "New"),
    ]

    CSS = """
    #templates-container {
        padding: 1;
    }

    #template-list {
        width: 30;
        height: 1fr;
        border: tall $primary;
    }

    #template-editor {
        width: 1fr;
        padding-left: 1;
    }

    .template-field {
        height: 3;
    }

    .field-label {
        width: 14;
        padding: 1 1 0 0;
        text-align: right;
    }

    .template-field Input {
        width: 1fr;
    }

    #headers-editor {
        height: 8;
        border: tall $primary;
    }

    #body-editor {
        height: 1fr;
        border: tall $primary;
    }

    #template-actions {
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #template-actions Button {
        margin: 0 1;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._selected: str | None = None

    def compose(self) -> ComposeResult:
        """
        Compose the templates screen layout.

        Layout:
        ┌──────────┬──────────────────────────────────────┐
        │ Standard │ Name:        [                     ] │
        │ Hello    │ Description: [                     ] │
        │          │ [headers editor                    ] │
        │          │ [body editor                       ] │
        │          │ [New] [Save] [Delete] [Copy] [Use]   │
        └──────────┴──────────────────────────────────────┘
        """
        yield Header()

        with Horizontal(id="templates-container"):
            yield OptionList(id="template-list")

            with Vertical(id="template-editor"):
                with Horizontal(classes="template-field"):
                    yield Static("Name:", classes="field-label")
                    yield Input(id="name-input", placeholder="Template name")
                with Horizontal(classes="template-field"):
                    yield Static("Description:", classes="field-label")
                    yield Input(id="description-input", placeholder="Description")

                yield TextArea("", id="headers-editor")
                yield TextArea("", id="body-editor")

                with Horizontal(id="template-actions"):
                    yield Button("New", id="new-btn")
                    yield Button("Save", id="save-btn", variant="primary")
                    yield Button("Delete", id="delete-btn", variant="error")
                    yield Button("Copy", id="copy-btn")
                    yield Button("Use", id="use-btn")

        yield Footer()

    def on_mount(self) -> None:
        """Fill the template list."""
        self._refresh_list()

    def _refresh_list(self) -> None:
        option_list = self.query_one("#template-list", OptionList)
        option_list.clear_options()
        option_list.add_options(self.app.templates.names())

    def _show(self, template: Template | None) -> None:
        """Load a template (or blanks) into the editor fields."""
        template = template or Template(name="")
        self.query_one("#name-input", Input).value = template.name
        self.query_one("#description-input", Input).value = template.description
        self.query_one("#headers-editor", TextArea).text = template.headers
        self.query_one("#body-editor", TextArea).text = template.body

    def _form_template(self) -> Template:
        """Build a template from the current field values."""
        return Template(
            name=self.query_one("#name-input", Input).value.strip(),
            description=self.query_one("#description-input", Input).value,
            headers=self.query_one("#headers-editor", TextArea).text,
            body=self.query_one("#body-editor", TextArea).text,
        )

    def _selected_template(self) -> Template | None:
        """The selected template, or None (with a notification)."""
        template = self.app.templates.get(self._selected) if self._selected else None
        if template is None:
            self.notify("No template selected", severity="error")
        return template

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        """Show the chosen template."""
        self._selected = str(event.option.prompt)
        self._show(self.app.templates.get(self._selected))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        if event.button.id == "new-btn":
            self.action_new_template()
        elif event.button.id == "save-btn":
            self.action_save_template()
        elif event.button.id == "delete-btn":
            self.action_delete_template()
        elif event.button.id == "copy-btn":
            self.action_copy_template()
        elif event.button.id == "use-btn":
            self.action_use_template()

    def action_new_template(self) -> None:
        """Clear the fields for a new template."""
        self._selected = None
        self._show(None)

    def action_save_template(self) -> None:
        """Save the current fields (replacing a template with the same name)."""
        try:
            template = self.app.templates.upsert(self._form_template())
        except (TemplateError, OSError) as e:
            self.notify(str(e), severity="error")
            return

        self._selected = template.name
        self._refresh_list()
        self.notify(f"Saved template: {template.name}", timeout=2)

    def action_delete_template(self) -> None:
        """Delete the selected template."""
        template = self._selected_template()
        if template is None:
            return

        try:
            self.app.templates.delete(template.name)
        except (TemplateError, OSError) as e:
            self.notify(str(e), severity="error")
            return

        self._refresh_list()
        self.action_new_template()

    def action_copy_template(self) -> None:
        """Copy the selected template's text to the clipboard."""
        template = self._selected_template()
        if template is not None:
            self.app.copy_to_clipboard(template.full_text())
            self.notify("Template copied", timeout=2)

    def action_use_template(self) -> None:
        """Open the selected template in the compose editor."""
        template = self._selected_template()
        if template is None:
            return

        self.app.get_screen("compose").load_message(template.full_text())
        self.app.switch_screen("compose")
