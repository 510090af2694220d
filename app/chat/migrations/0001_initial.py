# Generated manually for groups, communities and messages

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Group",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("name", models.CharField(help_text="Group display name", max_length=100)),
                ("description", models.TextField(blank=True, default="", help_text="Group description")),
                ("avatar", models.TextField(blank=True, default="", help_text="Group avatar as a data URL or remote URL")),
            ],
            options={
                "db_table": "chat_group",
                "ordering": ["-updated_at"],
            },
        ),
        migrations.CreateModel(
            name="Community",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("name", models.CharField(help_text="Community name (globally unique)", max_length=100, unique=True)),
                ("description", models.TextField(blank=True, default="", help_text="Community description")),
                ("avatar", models.TextField(blank=True, default="", help_text="Community avatar as a data URL or remote URL")),
                (
                    "admin",
                    models.ForeignKey(
                        help_text="Owning admin (independent of membership)",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="owned_communities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_community",
                "verbose_name_plural": "communities",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="GroupMembership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("joined_at", models.DateTimeField(default=django.utils.timezone.now, help_text="When the user joined this conversation")),
                ("last_seen_at", models.DateTimeField(blank=True, help_text="Last time the user marked this conversation read (null = never)", null=True)),
                ("is_admin", models.BooleanField(default=False, help_text="Whether this member administers the group")),
                (
                    "group",
                    models.ForeignKey(
                        help_text="Group this membership belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="chat.group",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Member user",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="group_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_group_membership",
                "ordering": ["joined_at", "id"],
                "indexes": [models.Index(fields=["group", "is_admin"], name="chat_gmem_admin_idx")],
                "constraints": [models.UniqueConstraint(fields=("group", "user"), name="unique_group_membership")],
            },
        ),
        migrations.CreateModel(
            name="CommunityMembership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("joined_at", models.DateTimeField(default=django.utils.timezone.now, help_text="When the user joined this conversation")),
                ("last_seen_at", models.DateTimeField(blank=True, help_text="Last time the user marked this conversation read (null = never)", null=True)),
                (
                    "community",
                    models.ForeignKey(
                        help_text="Community this membership belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="memberships",
                        to="chat.community",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Member user",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="community_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_community_membership",
                "ordering": ["joined_at", "id"],
                "constraints": [models.UniqueConstraint(fields=("community", "user"), name="unique_community_membership")],
            },
        ),
        migrations.AddField(
            model_name="group",
            name="members",
            field=models.ManyToManyField(
                help_text="Current members of the group",
                related_name="chat_groups",
                through="chat.GroupMembership",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        migrations.AddField(
            model_name="community",
            name="members",
            field=models.ManyToManyField(
                help_text="Current members of the community",
                related_name="chat_communities",
                through="chat.CommunityMembership",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                (
                    "message_type",
                    models.CharField(
                        choices=[
                            ("text", "Text"),
                            ("image", "Image"),
                            ("video", "Video"),
                            ("document", "Document"),
                            ("system", "System"),
                        ],
                        default="text",
                        help_text="Content kind",
                        max_length=10,
                    ),
                ),
                ("content", models.TextField(help_text="Message text or system event text")),
                ("file_url", models.TextField(blank=True, default="", help_text="Attachment URL for image/video/document messages")),
                ("file_name", models.CharField(blank=True, default="", help_text="Attachment display name", max_length=255)),
                ("read", models.BooleanField(default=False, help_text="Read flag for direct messages")),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="User who sent this message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "recipient",
                    models.ForeignKey(
                        blank=True,
                        help_text="Recipient of a direct message",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="received_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "group",
                    models.ForeignKey(
                        blank=True,
                        help_text="Group this message was sent to",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="chat.group",
                    ),
                ),
                (
                    "community",
                    models.ForeignKey(
                        blank=True,
                        help_text="Community this message was sent to",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="chat.community",
                    ),
                ),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["sender", "recipient", "read"], name="chat_msg_direct_idx"),
                    models.Index(fields=["group", "created_at"], name="chat_msg_group_idx"),
                    models.Index(fields=["community", "created_at"], name="chat_msg_community_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("community__isnull", True), ("group__isnull", True), ("recipient__isnull", False)),
                            models.Q(("community__isnull", True), ("group__isnull", False), ("recipient__isnull", True)),
                            models.Q(("community__isnull", False), ("group__isnull", True), ("recipient__isnull", True)),
                            _connector="OR",
                        ),
                        name="message_single_destination",
                    ),
                ],
            },
        ),
    ]
