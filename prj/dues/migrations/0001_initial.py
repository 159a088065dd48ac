# dues/migrations/0001_initial.py
#
# Due (with its ledger snapshot columns) and PaymentClaim.

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Due',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(help_text='Short description of what the due is for.', max_length=200)),
                ('description', models.TextField(blank=True)),
                ('total_amount_due', models.DecimalField(
                    decimal_places=2,
                    max_digits=10,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.01'))],
                )),
                ('payment_method_restriction', models.CharField(
                    choices=[
                        ('all', 'Any method'),
                        ('online_only', 'GCash / Maya only'),
                        ('cash_only', 'Cash only'),
                    ],
                    default='all',
                    max_length=20,
                )),
                ('due_date', models.DateField(
                    blank=True,
                    help_text='Optional deadline; unpaid dues past it show as overdue.',
                    null=True,
                )),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('amount_paid', models.DecimalField(
                    decimal_places=2, default=Decimal('0.00'), editable=False, max_digits=10,
                )),
                ('overpaid_amount', models.DecimalField(
                    decimal_places=2,
                    default=Decimal('0.00'),
                    editable=False,
                    help_text='Verified money above the total; needs manual reconciliation.',
                    max_digits=10,
                )),
                ('last_payment_at', models.DateTimeField(blank=True, editable=False, null=True)),
                ('created_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='created_dues',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('group', models.ForeignKey(
                    help_text='The group this due belongs to.',
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='dues',
                    to='accounts.studentgroup',
                )),
                ('owner', models.ForeignKey(
                    help_text='Member who owes this amount.',
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='dues',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Due',
                'verbose_name_plural': 'Dues',
                'ordering': ['due_date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='PaymentClaim',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(
                    decimal_places=2,
                    max_digits=10,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.01'))],
                )),
                ('method', models.CharField(
                    choices=[('gcash', 'GCash'), ('maya', 'Maya'), ('cash', 'Cash')],
                    max_length=10,
                )),
                ('payment_type', models.CharField(
                    choices=[('full', 'Full payment'), ('partial', 'Partial payment')],
                    default='full',
                    max_length=10,
                )),
                ('reference_id', models.CharField(
                    blank=True, help_text='GCash / Maya transaction reference number.', max_length=100,
                )),
                ('receipt_ref', models.CharField(
                    blank=True, help_text='Storage path of the uploaded receipt screenshot.', max_length=255,
                )),
                ('cash_confirmed', models.BooleanField(
                    default=False, help_text='Submitter confirmed they handed over cash.',
                )),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending verification'),
                        ('verified', 'Verified'),
                        ('rejected', 'Rejected'),
                    ],
                    default='pending',
                    max_length=20,
                )),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('decided_at', models.DateTimeField(blank=True, null=True)),
                ('decision_note', models.TextField(blank=True)),
                ('decided_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='decided_claims',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('due', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='claims',
                    to='dues.due',
                )),
                ('submitter', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='payment_claims',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Payment Claim',
                'verbose_name_plural': 'Payment Claims',
                'ordering': ['created_at', 'pk'],
                'indexes': [models.Index(fields=['due', 'status'], name='dues_claim_due_status_idx')],
            },
        ),
    ]
