# Generated manually for the circles app

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Circle',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True, null=True)),
                ('avatar', models.URLField(blank=True, max_length=500, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='created_circles', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'circles',
                'ordering': ['-updated_at'],
                'indexes': [models.Index(fields=['created_by', 'created_at'], name='circles_creator_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='CircleMember',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('member', 'Member')], default='member', max_length=20)),
                ('nickname', models.CharField(blank=True, max_length=100, null=True)),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('circle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='circles.circle')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='circle_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'circle_members',
                'ordering': ['joined_at'],
                'indexes': [
                    models.Index(fields=['circle', 'role'], name='circle_members_role_idx'),
                    models.Index(fields=['user', 'joined_at'], name='circle_members_user_idx'),
                ],
                'constraints': [models.UniqueConstraint(fields=('circle', 'user'), name='unique_circle_member')],
            },
        ),
        migrations.CreateModel(
            name='CircleInvitation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('direct', 'Direct'), ('link', 'Link')], max_length=10)),
                ('code', models.CharField(editable=False, max_length=22, unique=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('expired', 'Expired'), ('revoked', 'Revoked')], default='pending', max_length=10)),
                ('max_uses', models.PositiveIntegerField(blank=True, null=True)),
                ('use_count', models.PositiveIntegerField(default=0)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('circle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='invitations', to='circles.circle')),
                ('invitee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='received_circle_invitations', to=settings.AUTH_USER_MODEL)),
                ('inviter', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sent_circle_invitations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'circle_invitations',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['circle', 'status'], name='circle_inv_circle_status_idx'),
                    models.Index(fields=['invitee', 'status'], name='circle_inv_invitee_status_idx'),
                    models.Index(fields=['status', 'expires_at'], name='circle_inv_expiry_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SharingPreference',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('privacy_level', models.CharField(choices=[('basic', 'Basic'), ('status', 'Status'), ('activity', 'Activity'), ('location', 'Location')], default='basic', max_length=20)),
                ('share_timezone', models.BooleanField(default=True)),
                ('share_availability', models.BooleanField(default=True)),
                ('share_location', models.BooleanField(default=False)),
                ('location_precision', models.CharField(choices=[('country', 'Country'), ('city', 'City'), ('neighborhood', 'Neighborhood'), ('exact', 'Exact')], default='city', max_length=20)),
                ('share_activity', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('circle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sharing_preferences', to='circles.circle')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='circle_sharing_preferences', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'circle_sharing_preferences',
                'constraints': [models.UniqueConstraint(fields=('circle', 'user'), name='unique_circle_sharing_preference')],
            },
        ),
    ]
