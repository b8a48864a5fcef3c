import uuid

import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('role', models.CharField(choices=[('patient', 'Patient'), ('reception', 'Reception'), ('triage', 'Triage nurse'), ('doctor', 'Doctor'), ('billing', 'Billing'), ('admin', 'Administrator')], db_index=True, default='patient', max_length=20)),
                ('specialization', models.CharField(blank=True, max_length=120)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'abstract': False,
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='DailySequence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('scope', models.CharField(max_length=20)),
                ('day', models.DateField()),
                ('last_value', models.PositiveIntegerField(default=0)),
            ],
            options={
                'constraints': [models.UniqueConstraint(fields=('scope', 'day'), name='uniq_sequence_scope_day')],
            },
        ),
        migrations.CreateModel(
            name='Visit',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('visit_number', models.CharField(max_length=40, unique=True)),
                ('current_stage', models.CharField(choices=[('reception', 'Reception'), ('triage', 'Triage'), ('doctor', 'Doctor'), ('pharmacy', 'Pharmacy'), ('lab', 'Lab'), ('billing', 'Billing')], db_index=True, default='reception', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('stage_entered_at', models.DateTimeField()),
                ('assigned_doctor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_visits', to=settings.AUTH_USER_MODEL)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='visits', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='QueueEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('stage', models.CharField(choices=[('reception', 'Reception'), ('triage', 'Triage'), ('doctor', 'Doctor'), ('pharmacy', 'Pharmacy'), ('lab', 'Lab'), ('billing', 'Billing')], max_length=20)),
                ('token_number', models.CharField(max_length=32)),
                ('token_date', models.DateField()),
                ('token_seq', models.PositiveIntegerField()),
                ('priority', models.CharField(choices=[('standard', 'Standard'), ('urgent', 'Urgent'), ('emergency', 'Emergency')], default='standard', max_length=20)),
                ('priority_rank', models.PositiveSmallIntegerField(default=0)),
                ('status', models.CharField(choices=[('waiting', 'Waiting'), ('called', 'Called'), ('served', 'Served'), ('skipped', 'Skipped')], default='waiting', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('called_at', models.DateTimeField(blank=True, null=True)),
                ('served_at', models.DateTimeField(blank=True, null=True)),
                ('skipped_at', models.DateTimeField(blank=True, null=True)),
                ('doctor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='queue_entries', to=settings.AUTH_USER_MODEL)),
                ('visit', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='entries', to='flow.visit')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['stage', 'status', '-priority_rank', 'created_at'], name='flow_queue_order_idx'),
                    models.Index(fields=['stage', 'doctor', 'status'], name='flow_queue_doctor_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('stage', 'token_date', 'token_seq'), name='uniq_token_per_stage_day'),
                    models.UniqueConstraint(condition=models.Q(('status__in', ['waiting', 'called'])), fields=('visit', 'stage'), name='uniq_active_entry_per_visit_stage'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TriageRecord',
            fields=[
                ('visit', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='triage', serialize=False, to='flow.visit')),
                ('temperature', models.FloatField(blank=True, null=True)),
                ('systolic', models.FloatField(blank=True, null=True)),
                ('diastolic', models.FloatField(blank=True, null=True)),
                ('heart_rate', models.FloatField(blank=True, null=True)),
                ('spo2', models.FloatField(blank=True, null=True)),
                ('weight', models.FloatField(blank=True, null=True)),
                ('height', models.FloatField(blank=True, null=True)),
                ('symptoms', models.TextField(blank=True, null=True)),
                ('allergies', models.TextField(blank=True, null=True)),
                ('current_meds', models.TextField(blank=True, null=True)),
                ('pain_scale', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('priority', models.CharField(blank=True, choices=[('standard', 'Standard'), ('urgent', 'Urgent'), ('emergency', 'Emergency')], max_length=20, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='triage_records', to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
