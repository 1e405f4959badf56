"""
Streamlit Frontend for SIGEG

Dashboard for the two users: summary cards, charts, and one searchable
table per user with add / edit / delete / toggle-delivered actions.

DESIGN PRINCIPLES:
1. Every action shows up immediately (optimistic update)
2. If the server rejects it, the change quietly disappears again
3. Loading problems are shown, with a retry button
4. poe edits both tables, poisson only their own

Streamlit reruns this script on every interaction. Each action runs on
a short-lived event loop: the change is applied locally, then the loop
drains the background sync before the page is drawn again.
"""

import asyncio
from typing import Callable, Optional

import pandas as pd
import plotly.express as px
import streamlit as st
from pydantic import ValidationError

from sigeg.audit import AuditLogger, configure_logging
from sigeg.auth import BcryptAuthenticator, can_edit
from sigeg.config import get_settings
from sigeg.models.task import Task, TaskDraft, Tenant
from sigeg.reconciliation import (
    ReconciliationClient,
    UnknownTaskError,
    compare,
    filter_tasks,
    summarize,
    total,
)
from sigeg.services.storage import (
    HttpTaskStorage,
    JsonFileTaskStorage,
    TaskStorageInterface,
)


# Page configuration
st.set_page_config(
    page_title="SIGEG - Sistema de Gestión de Ganancias",
    page_icon="📊",
    layout="wide",
)

TENANT_COLORS = {
    Tenant.POE: "rgb(99, 102, 241)",
    Tenant.POISSON: "rgb(236, 72, 153)",
}

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .row-delivered {
        color: #16a34a;
        font-weight: bold;
    }
    .row-pending {
        color: #dc2626;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> tuple[BcryptAuthenticator, AuditLogger]:
    """Get or create shared components (cached across sessions)."""
    configure_logging(get_settings().app.log_level)
    return BcryptAuthenticator(), AuditLogger()


def build_remote() -> TaskStorageInterface:
    client_settings = get_settings().client
    if client_settings.backend == "local":
        return JsonFileTaskStorage()
    return HttpTaskStorage()


def get_client(audit_logger: AuditLogger) -> ReconciliationClient:
    """The session's reconciliation client, loaded on first use."""
    if "client" not in st.session_state:
        client = ReconciliationClient(build_remote(), audit_logger)
        with st.spinner("Cargando datos..."):
            run_async(client.load())
        st.session_state.client = client
    return st.session_state.client


def apply_action(client: ReconciliationClient, action: Callable[[], object]) -> None:
    """
    Run one optimistic action and let its sync finish.

    Sync failures are already rolled back by the client; nothing to show.
    """
    async def _run():
        action()
        await client.wait_pending()

    try:
        run_async(_run())
    except UnknownTaskError:
        st.warning("Esa asignación ya no existe.")


def main():
    """Main application entry point."""
    authenticator, audit_logger = get_components()

    if "user" not in st.session_state:
        render_login_page(authenticator, audit_logger)
        return

    user = Tenant(st.session_state.user)
    client = get_client(audit_logger)

    render_header(user, client, audit_logger)
    render_summary(client)
    render_charts(client)

    col1, col2 = st.columns(2)
    with col1:
        render_table(client, user, Tenant.POE)
    with col2:
        render_table(client, user, Tenant.POISSON)


def render_login_page(authenticator: BcryptAuthenticator, audit_logger: AuditLogger):
    """Render the login form."""
    _, center, _ = st.columns([1, 2, 1])
    with center:
        st.title("📊 SIGEG")
        st.markdown("Sistema de Gestión de Ganancias")

        with st.form("login"):
            username = st.text_input("Usuario", placeholder="Introduce tu usuario")
            password = st.text_input(
                "Contraseña",
                type="password",
                placeholder="Introduce tu contraseña",
            )
            submitted = st.form_submit_button("Iniciar Sesión →", type="primary")

        if submitted:
            tenant = authenticator.authenticate(username, password)
            run_async(audit_logger.log_login(username.lower(), tenant is not None))
            if tenant is None:
                st.error("Usuario o contraseña incorrectos")
            else:
                st.session_state.user = tenant.value
                st.rerun()


def render_header(user: Tenant, client: ReconciliationClient, audit_logger: AuditLogger):
    """Title, user badge, logout and the load-error banner."""
    col1, col2, col3 = st.columns([6, 1, 1])
    with col1:
        st.title("📊 SIGEG - Sistema de Gestión de Ganancias")
    with col2:
        st.markdown(f"### 👤 {user.display_name}")
    with col3:
        if st.button("Cerrar Sesión"):
            run_async(audit_logger.log_logout(user.value))
            for key in ("user", "client", "editing"):
                st.session_state.pop(key, None)
            st.rerun()

    if client.load_error:
        banner, retry = st.columns([6, 1])
        with banner:
            st.error(f"⚠️ {client.load_error}")
        with retry:
            if st.button("Reintentar"):
                run_async(client.load())
                st.rerun()


def render_summary(client: ReconciliationClient):
    """Summary cards for both users and their differences."""
    poe = summarize(Tenant.POE, client.tasks(Tenant.POE))
    poisson = summarize(Tenant.POISSON, client.tasks(Tenant.POISSON))
    comparison = compare(poe, poisson)

    cols = st.columns(4)
    for col, summary in zip(cols, (poe, poisson)):
        with col:
            st.metric(summary.tenant.display_name, f"{summary.total}€")
            st.caption(f"Entregado: {summary.delivered}€")
            st.caption(f"Pendiente: {summary.pending}€")

    with cols[2]:
        st.metric("Diferencia Total", f"{comparison.difference:+d}€")
        lead = "lidera" if comparison.leader == Tenant.POE else "por detrás"
        st.caption(f"Poe {lead}")

    with cols[3]:
        st.metric("Diferencia Entregado", f"{comparison.delivered_difference:+d}€")
        st.caption("En pagos confirmados")


def render_charts(client: ReconciliationClient):
    """Grouped bar comparison and delivered/pending distribution."""
    summaries = [summarize(t, client.tasks(t)) for t in Tenant]

    bars = pd.DataFrame(
        [
            {"Usuario": s.tenant.display_name, "Concepto": concept, "Euros": value}
            for s in summaries
            for concept, value in (
                ("Total Previsto", s.total),
                ("Entregado", s.delivered),
                ("Pendiente", s.pending),
            )
        ]
    )
    distribution = pd.DataFrame(
        [
            {"Concepto": f"{s.tenant.display_name} {label}", "Euros": value}
            for s in summaries
            for label, value in (("Entregado", s.delivered), ("Pendiente", s.pending))
        ]
    )

    col1, col2 = st.columns([3, 2])
    with col1:
        fig_bar = px.bar(
            bars,
            x="Concepto",
            y="Euros",
            color="Usuario",
            barmode="group",
            title="Comparación de Ganancias (€)",
            color_discrete_map={
                t.display_name: TENANT_COLORS[t] for t in Tenant
            },
        )
        st.plotly_chart(fig_bar, use_container_width=True)
    with col2:
        if distribution["Euros"].sum() > 0:
            fig_pie = px.pie(
                distribution,
                names="Concepto",
                values="Euros",
                title="Distribución de Ganancias",
                hole=0.4,
            )
            st.plotly_chart(fig_pie, use_container_width=True)
        else:
            st.info("Sin ganancias registradas todavía.")


def render_table(client: ReconciliationClient, user: Tenant, tenant: Tenant):
    """One user's task table, with actions if `user` may edit it."""
    editable = can_edit(user, tenant)

    st.subheader(f"Ingresos: {tenant.display_name}")
    search = st.text_input(
        "Buscar asignación...",
        key=f"search_{tenant.value}",
        placeholder="🔍 Buscar asignación...",
    )
    tasks = filter_tasks(client.tasks(tenant), search)

    if editable:
        render_task_form(client, tenant)

    if not tasks:
        st.info("🔍 No se encontraron asignaciones")
    elif editable:
        for task in tasks:
            render_editable_row(client, tenant, task)
    else:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Asignación": t.asignacion,
                        "ID": t.id_code,
                        "Ganancia Prevista (€)": t.ganancia,
                        "Entregada": "✓" if t.entregada else "✗",
                    }
                    for t in tasks
                ]
            ),
            hide_index=True,
            use_container_width=True,
        )

    st.markdown(f"**Total: {total(tasks)}€**")


def render_editable_row(client: ReconciliationClient, tenant: Tenant, task: Task):
    key = f"{tenant.value}_{task.id}"
    cols = st.columns([4, 2, 2, 1, 1, 1])

    css = "row-delivered" if task.entregada else "row-pending"
    cols[0].markdown(task.asignacion)
    cols[1].markdown(f"`{task.id_code}`" if task.id_code else "")
    cols[2].markdown(f"<span class='{css}'>{task.ganancia}€</span>", unsafe_allow_html=True)

    if cols[3].button("✓" if task.entregada else "✗", key=f"toggle_{key}"):
        apply_action(client, lambda: client.toggle_status(tenant, task.id))
        st.rerun()
    if cols[4].button("✏️", key=f"edit_{key}"):
        st.session_state.editing = (tenant.value, task.id)
        st.rerun()
    if cols[5].button("🗑️", key=f"delete_{key}"):
        apply_action(client, lambda: client.delete_entry(tenant, task.id))
        st.rerun()


def render_task_form(client: ReconciliationClient, tenant: Tenant):
    """Add form, or edit form when a task of this table is being edited."""
    editing: Optional[Task] = None
    if st.session_state.get("editing", (None, None))[0] == tenant.value:
        editing = client.find(tenant, st.session_state.editing[1])

    title = "Editar Asignación" if editing else "➕ Nueva Asignación"
    with st.expander(title, expanded=editing is not None):
        with st.form(f"task_form_{tenant.value}", clear_on_submit=True):
            asignacion = st.text_input(
                "Nombre de la Asignación",
                value=editing.asignacion if editing else "",
                placeholder="Ej: Práctica1 version 1 CAST - Sistemas operativos (75.566)",
            )
            id_code = st.text_input(
                "ID de la Asignación",
                value=editing.id_code if editing else "",
                placeholder="Ej: (31352 . 48320)",
            )
            ganancia = st.number_input(
                "Ganancia Prevista (€)",
                min_value=0,
                step=1,
                value=editing.ganancia if editing else 0,
            )
            entregada = st.checkbox(
                "¿Ya está entregada?",
                value=editing.entregada if editing else False,
            )

            col1, col2 = st.columns(2)
            submitted = col1.form_submit_button(
                "Guardar Cambios 💾" if editing else "Añadir Asignación ➕",
                type="primary",
            )
            cancelled = col2.form_submit_button("Cancelar")

        if cancelled:
            st.session_state.pop("editing", None)
            st.rerun()

        if submitted:
            try:
                draft = TaskDraft(
                    asignacion=asignacion,
                    id_code=id_code,
                    ganancia=int(ganancia),
                    entregada=entregada,
                )
            except ValidationError:
                st.error("La asignación necesita un nombre y una ganancia válida.")
                return

            if editing:
                updated = Task(**draft.model_dump(), id=editing.id)
                apply_action(client, lambda: client.edit_entry(tenant, updated))
                st.session_state.pop("editing", None)
            else:
                apply_action(client, lambda: client.add_entry(tenant, draft))
            st.rerun()


if __name__ == "__main__":
    main()
