"""esquema inicial del catálogo de estudios

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""

import sqlalchemy as sa

from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("nombre", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("contrasena", sa.String(255), nullable=False),
        sa.Column("rol", sa.String(20), nullable=False),
        sa.UniqueConstraint("nombre", name="uq_usuarios_nombre"),
        sa.UniqueConstraint("email", name="uq_usuarios_email"),
    )
    op.create_table(
        "codigos_usuarios",
        sa.Column("codigo", sa.String(64), primary_key=True),
        sa.Column("tipo_usuario", sa.String(20), nullable=False),
        sa.Column("usado", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("fecha_uso", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "pacientes",
        sa.Column("id_paciente", sa.Integer(), primary_key=True),
        sa.Column("edad", sa.Integer(), nullable=False),
        sa.Column("genero", sa.String(20), nullable=False),
        sa.Column("notas_generales", sa.Text(), nullable=True),
        sa.CheckConstraint("edad BETWEEN 0 AND 120", name="ck_pacientes_edad"),
    )
    op.create_table(
        "patologias",
        sa.Column("id_patologia", sa.Integer(), primary_key=True),
        sa.Column("nombre_patologia", sa.String(255), nullable=False),
        sa.UniqueConstraint("nombre_patologia", name="uq_patologias_nombre"),
    )
    op.create_table(
        "estudios",
        sa.Column("id_estudio", sa.Integer(), primary_key=True),
        sa.Column(
            "id_paciente",
            sa.Integer(),
            sa.ForeignKey("pacientes.id_paciente"),
            nullable=False,
        ),
        sa.Column("archivo_ruta", sa.String(500), nullable=False),
        sa.Column("perspectiva", sa.String(30), nullable=False),
        sa.Column("vaso_evaluado", sa.String(30), nullable=False),
        sa.Column("lado", sa.String(20), nullable=False),
        sa.Column(
            "fecha_estudio", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("ix_estudios_id_paciente", "estudios", ["id_paciente"])
    op.create_index("ix_estudios_fecha_estudio", "estudios", ["fecha_estudio"])
    op.create_table(
        "imagenes_estudio",
        sa.Column("id_imagen", sa.Integer(), primary_key=True),
        sa.Column(
            "id_estudio",
            sa.Integer(),
            sa.ForeignKey("estudios.id_estudio", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("ruta_archivo", sa.String(500), nullable=False),
    )
    op.create_index("ix_imagenes_estudio_id_estudio", "imagenes_estudio", ["id_estudio"])
    op.create_table(
        "estudios_patologias",
        sa.Column(
            "id_estudio",
            sa.Integer(),
            sa.ForeignKey("estudios.id_estudio", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "id_patologia",
            sa.Integer(),
            sa.ForeignKey("patologias.id_patologia"),
            primary_key=True,
        ),
        sa.Column("grado_severidad", sa.String(20), nullable=False),
        sa.Column("nota_especifica", sa.Text(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("estudios_patologias")
    op.drop_index("ix_imagenes_estudio_id_estudio", table_name="imagenes_estudio")
    op.drop_table("imagenes_estudio")
    op.drop_index("ix_estudios_fecha_estudio", table_name="estudios")
    op.drop_index("ix_estudios_id_paciente", table_name="estudios")
    op.drop_table("estudios")
    op.drop_table("patologias")
    op.drop_table("pacientes")
    op.drop_table("codigos_usuarios")
    op.drop_table("usuarios")
